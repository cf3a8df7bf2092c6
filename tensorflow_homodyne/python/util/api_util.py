# Copyright 2022 University College London. All Rights Reserved.
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
"""Utilities to export symbols to the API.

Public symbols are registered with `export` under one or more names of the
form `"namespace.name"`. At import time, `tensorflow_homodyne/__init__.py`
builds one module per namespace (e.g. `tfhd.recon`) holding the registered
symbols.
"""

import sys
import types


_API_SYMBOLS = dict()

_API_ATTR = '_api_names'

_NAMESPACE_DOCSTRINGS = {
    'linalg': "Linear algebra operations.",
    'recon': "Image reconstruction.",
    'sampling': "k-space sampling operations.",
    'signal': "Signal processing operations."
}


def get_namespaces():
  """Returns a list of API namespaces."""
  return list(_NAMESPACE_DOCSTRINGS)


def get_canonical_name_for_symbol(symbol):
  """Get canonical name for the API symbol.

  Args:
    symbol: API function or class.

  Returns:
    Canonical name for the API symbol, or `None` if `symbol` was not exported.
  """
  api_names = getattr(symbol, _API_ATTR, None)
  if not api_names:
    return None
  # Canonical name is the first name in the list.
  return api_names[0]


def export(*names):
  """Returns a decorator to export a symbol to the API.

  Args:
    *names: List of API names under which the object should be exported.

  Returns:
    A decorator to export a symbol to the API.
  """
  def decorator(symbol):
    """Decorator to export a symbol to the API.

    Args:
      symbol: Symbol to decorate.

    Returns:
      The input symbol with the `_api_names` attribute set.

    Raises:
      ValueError: If the name is invalid or already used.
    """
    for name in names:
      # API name must have format "namespace.name".
      if name.count('.') != 1:
        raise ValueError(f"Invalid API name: {name}")
      namespace, _ = name.split('.')
      if namespace not in _NAMESPACE_DOCSTRINGS:
        raise ValueError(f"Invalid API namespace: {namespace}")
      if name in _API_SYMBOLS:
        raise ValueError(
            f"Name {name} already used for exported symbol {symbol}")
      _API_SYMBOLS[name] = symbol
    setattr(symbol, _API_ATTR, names)
    return symbol

  return decorator


def import_namespace(namespace):
  """Creates the public module for a namespace.

  Args:
    namespace: Namespace to import.

  Returns:
    The created module, also registered in `sys.modules`.
  """
  module = types.ModuleType(f'tensorflow_homodyne.{namespace}',
                            _NAMESPACE_DOCSTRINGS[namespace])
  for api_name, symbol in _API_SYMBOLS.items():
    symbol_namespace, name = api_name.split('.')
    if symbol_namespace == namespace:
      setattr(module, name, symbol)
  sys.modules[module.__name__] = module
  return module
