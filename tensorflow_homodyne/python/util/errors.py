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
"""Errors raised by partial Fourier reconstruction."""


class HomodyneError(ValueError):
  """Base class for errors raised on invalid reconstruction inputs."""


class InputShapeError(HomodyneError):
  """Raised when k-space does not have a valid single-coil 2D/3D shape."""


class SamplingError(HomodyneError):
  """Raised when the k-space sampling pattern cannot be used.

  The sampled region must be a single contiguous block along every spatial
  axis and must be asymmetric along the partially sampled axis.
  """


class FullySampledError(HomodyneError):
  """Raised when k-space is fully sampled along every axis."""


class ConfigError(HomodyneError):
  """Raised on an unknown reconstruction option (e.g. method or window)."""
