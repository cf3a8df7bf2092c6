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
"""About TensorFlow Homodyne."""

__all__ = [
    "__title__",
    "__summary__",
    "__uri__",
    "__version__",
    "__author__",
    "__email__",
    "__license__",
    "__copyright__",
]

__title__ = "tensorflow-homodyne"
__summary__ = ("Partial Fourier (homodyne, POCS and phase-constrained "
               "least-squares) MRI reconstruction in TensorFlow.")
__uri__ = "https://github.com/mrphys/tensorflow-homodyne"

__version__ = "0.1.0"

__author__ = "Javier Montalt Tordera"
__email__ = "javier.montalt@outlook.com"

__license__ = "Apache 2.0"
__copyright__ = "2021 University College London"
