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
"""Tests for module `fft_ops`."""
# pylint: disable=missing-class-docstring,missing-function-docstring

from absl.testing import parameterized
import numpy as np
import tensorflow as tf

from tensorflow_homodyne.python.ops import fft_ops
from tensorflow_homodyne.python.util import errors
from tensorflow_homodyne.python.util import test_util


class FFTOpsTest(test_util.TestCase):
  """Tests for FFT ops."""
  @parameterized.product(transform=['forward', 'backward'],
                         axes=[None, (0, 1), (2,), (-1, 0), (0, 1, 2)],
                         norm=['forward', 'backward', 'ortho'],
                         shift=[False, True])
  def test_fftn(self, transform, axes, norm, shift):  # pylint: disable=missing-param-doc
    rng = np.random.default_rng(0)
    x = (rng.uniform(size=(6, 5, 4)) +
         1j * rng.uniform(size=(6, 5, 4))).astype(np.complex128)

    if transform == 'forward':
      tf_op, np_op = fft_ops.fftn, np.fft.fftn
    else:
      tf_op, np_op = fft_ops.ifftn, np.fft.ifftn

    expected = x
    if shift:
      expected = np.fft.ifftshift(expected, axes=axes)
    expected = np_op(expected, axes=axes, norm=norm)
    if shift:
      expected = np.fft.fftshift(expected, axes=axes)

    result = tf_op(x, axes=axes, norm=norm, shift=shift)
    self.assertAllClose(expected, result)

  def test_inverse(self):
    rng = np.random.default_rng(1)
    x = (rng.normal(size=(7, 8)) +
         1j * rng.normal(size=(7, 8))).astype(np.complex64)
    result = fft_ops.ifftn(fft_ops.fftn(x, shift=True), shift=True)
    self.assertAllClose(x, result, rtol=1e-5, atol=1e-5)

  def test_invalid_dtype(self):
    with self.assertRaisesRegex(TypeError, "must be of a complex dtype"):
      fft_ops.fftn(tf.ones([4, 4], dtype=tf.float32))

  def test_invalid_axes(self):
    x = tf.ones([4, 4], dtype=tf.complex64)
    with self.assertRaisesRegex(ValueError, "out of range"):
      fft_ops.fftn(x, axes=[2])
    with self.assertRaisesRegex(ValueError, "must be unique"):
      fft_ops.fftn(x, axes=[0, 0])

  def test_too_many_axes(self):
    x = tf.ones([2, 2, 2, 2], dtype=tf.complex64)
    with self.assertRaisesRegex(ValueError, "at most 3 axes"):
      fft_ops.ifftn(x)

  def test_invalid_norm(self):
    with self.assertRaises(errors.ConfigError):
      fft_ops.fftn(tf.ones([4, 4], dtype=tf.complex64), norm='unitary')


if __name__ == '__main__':
  tf.test.main()
