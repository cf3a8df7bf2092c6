# Copyright 2021 University College London. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""Utilities for argument validation."""

import enum

from tensorflow_homodyne.python.util import errors


def validate_enum(value, valid_values, name=None, aliases=None):
  """Validates that value is in a list of valid values.

  Args:
    value: The value to validate.
    valid_values: The list of valid values, or an `enum.Enum` subclass. For
      enumerations, `value` may be a member or the (case-insensitive) value of
      a member.
    name: The name of the argument being validated. This is only used to format
      error messages.
    aliases: An optional `dict` mapping alternative names to valid values.

  Returns:
    A valid enum value. For enumerations, this is always a member of
    `valid_values`.

  Raises:
    ConfigError: If `value` is not in the list of valid values.
  """
  aliases = aliases or {}
  if isinstance(value, str):
    value = value.lower()
    value = aliases.get(value, value)

  if isinstance(valid_values, type) and issubclass(valid_values, enum.Enum):
    if isinstance(value, valid_values):
      return value
    try:
      return valid_values(value)
    except ValueError:
      names = sorted([m.value for m in valid_values] + list(aliases))
      raise errors.ConfigError(
          f"Argument `{name}` must be one of {names}, but received value: "
          f"{value}") from None

  if value not in valid_values:
    raise errors.ConfigError(
      f"Argument `{name}` must be one of {valid_values}, but received value: "
      f"{value}")
  return value


def validate_type(value, type_, name=None):
  """Validates that value is of the specified type.

  Args:
    value: The value to validate.
    type_: The requested type.
    name: The name of the argument being validated. This is only used to format
      error messages.

  Returns:
    A valid value of type `type_`.

  Raises:
    TypeError: If `value` does not have type `type_`.
  """
  if not isinstance(value, type_):
    raise TypeError(
      f"Argument `{name}` must be of type {type_}, "
      f"but received type: {type(value)}")
  return value


def validate_positive(value, name=None):
  """Validates that a Python number is strictly positive.

  Args:
    value: The value to validate.
    name: The name of the argument being validated.

  Returns:
    `value`.

  Raises:
    ConfigError: If `value` is not greater than zero.
  """
  if not value > 0:
    raise errors.ConfigError(
        f"Argument `{name}` must be positive, but received value: {value}")
  return value


def validate_axis(value,
                  rank=None,
                  min_length=None,
                  max_length=None,
                  canonicalize=None,
                  must_be_unique=True):
  """Validates that value is a valid list of axes.

  Args:
    value: The value to check. An `int` or an iterable of `ints`.
    rank: The rank of the tensor.
    min_length: The minimum number of axes.
    max_length: The maximum number of axes.
    canonicalize: Must be `"positive"`, `"negative"` or `None`.
    must_be_unique: If `True`, repeated axes are not allowed.

  Returns:
    A valid `list` of axes.

  Raises:
    ValueError: If `value` is not valid.
  """
  if isinstance(value, int):
    value = [value]
  value = list(value)

  if must_be_unique:
    if len(set(value)) != len(value):
      raise ValueError(
          f"Axes must be unique: {value}")

  if min_length is not None and len(value) < min_length:
    raise ValueError(
        f"Expected at least {min_length} axes, but got {len(value)}: {value}")
  if max_length is not None and len(value) > max_length:
    raise ValueError(
        f"Expected at most {max_length} axes, but got {len(value)}: {value}")

  if rank is not None:
    for v in value:
      if v >= rank or v < -rank: # pylint: disable=invalid-unary-operand-type
        raise ValueError(
            f"Axis {v} is out of range for a tensor of rank {rank}")

    if canonicalize == "positive":
      value = [v + rank if v < 0 else v for v in value]
    elif canonicalize == "negative":
      value = [v - rank if v >= 0 else v for v in value]
    elif canonicalize is not None:
      raise ValueError(f"Invalid value of `canonicalize`: {canonicalize}")

  return value
