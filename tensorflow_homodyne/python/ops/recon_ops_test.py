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
"""Tests for module `recon_ops`."""
# pylint: disable=missing-class-docstring,missing-function-docstring

from absl.testing import parameterized
import numpy as np
import tensorflow as tf

from tensorflow_homodyne.python.ops import recon_ops
from tensorflow_homodyne.python.util import errors
from tensorflow_homodyne.python.util import test_util


_NP_WINDOWS = {
    'step': np.ones_like,
    'linear': lambda r: r,
    'quadratic': lambda r: (r - 1) ** 2 * np.sign(r - 1) + 1,
    'cubic': lambda r: (r - 1) ** 3 + 1,
    'quartic': lambda r: (r - 1) ** 4 * np.sign(r - 1) + 1
}


def _np_filters(mask, axis, window):
  """NumPy version of the homodyne filters along `axis`."""
  other_axes = tuple(ax for ax in range(mask.ndim) if ax != axis)
  sampled = np.any(mask, axis=other_axes)
  high_pass = sampled.astype(np.float64)
  high_pass = high_pass + np.flip(1 - high_pass)
  center = np.nonzero(high_pass == 1)[0]
  center = np.arange(center[0] - 1, center[-1] + 2)
  ramp = np.linspace(high_pass[center[0]], high_pass[center[-1]], center.size)
  high_pass[center] = _NP_WINDOWS[window](ramp)
  low_pass = np.sqrt(np.maximum(0, 1 - (high_pass - 1) ** 2))

  shape = [1] * mask.ndim
  shape[axis] = -1
  return high_pass.reshape(shape), low_pass.reshape(shape)


def _np_ifftn(kspace):
  return np.fft.ifftn(np.fft.ifftshift(kspace))


def _np_phase(kspace, low_pass):
  return np.angle(_np_ifftn(kspace * low_pass))


def _np_homodyne(kspace, axis, window='cubic'):
  """NumPy homodyne reconstruction. Returns centred image and phase."""
  high_pass, low_pass = _np_filters(kspace != 0, axis, window)
  phase = _np_phase(kspace, low_pass)
  image = np.real(_np_ifftn(kspace * high_pass) * np.exp(-1j * phase))
  return np.fft.fftshift(image), np.fft.fftshift(phase)


def _np_pocs(kspace, axis, max_iter, window='cubic'):
  """NumPy POCS reconstruction. Returns centred image."""
  mask = kspace != 0
  _, low_pass = _np_filters(mask, axis, window)
  modulator = np.exp(1j * _np_phase(kspace, low_pass))
  work = kspace.copy()
  for _ in range(max_iter):
    image = np.abs(np.fft.ifftn(work))
    work = np.fft.fftshift(np.fft.fftn(image * modulator))
    work[mask] = kspace[mask]
  return np.fft.fftshift(image)


def _np_least_squares(kspace, axis, regularization, damping, window='cubic'):
  """Exact solution of the phase-constrained least squares problem."""
  mask = kspace != 0
  _, low_pass = _np_filters(mask, axis, window)
  phase = _np_phase(kspace, low_pass)
  matrix = test_util.phase_constraint_matrix(
      phase, mask, regularization=regularization, damping=damping)
  rhs = (np.exp(-1j * phase) * _np_ifftn(kspace)).ravel()
  solution = np.linalg.solve(matrix, np.concatenate([rhs.real, rhs.imag]))
  return np.fft.fftshift(solution[:rhs.size].reshape(kspace.shape))


def _truncate(kspace, axis, stop):
  """Zero-fills `kspace` after position `stop` along `axis`."""
  kspace = kspace.copy()
  index = [slice(None)] * kspace.ndim
  index[axis] = slice(stop, None)
  kspace[tuple(index)] = 0
  return kspace


def _relative_error(expected, actual):
  return np.linalg.norm(actual - expected) / np.linalg.norm(expected)


class PhaseTestCase(test_util.TestCase):
  def assertPhaseClose(self, expected, actual, atol=1e-6):  # pylint: disable=invalid-name
    difference = np.angle(np.exp(1j * (self.get_nd_array(actual) - expected)))
    self.assertAllClose(np.zeros_like(difference), difference, atol=atol)


class ReconstructHomodyneTest(PhaseTestCase):
  """Tests for op `reconstruct_homodyne`."""
  @classmethod
  def setUpClass(cls):
    super().setUpClass()
    cls.magnitude, image = test_util.phantom([63, 63])
    cls.kspace = test_util.centered_fftn(image)
    cls.partial_kspace = _truncate(cls.kspace, 0, 38)

  @parameterized.parameters('step', 'linear', 'quadratic', 'cubic', 'quartic')
  def test_homodyne_matches_reference(self, window):  # pylint: disable=missing-param-doc
    image, phase = recon_ops.reconstruct_homodyne(self.partial_kspace,
                                                  window=window)
    expected_image, expected_phase = _np_homodyne(self.partial_kspace, 0,
                                                  window=window)
    self.assertAllClose(expected_image, image, rtol=1e-6, atol=1e-8)
    self.assertPhaseClose(expected_phase, phase)

  def test_homodyne_axis_1(self):
    kspace = _truncate(self.kspace, 1, 40)
    image, _ = recon_ops.reconstruct_homodyne(kspace)
    expected_image, _ = _np_homodyne(kspace, 1)
    self.assertAllClose(expected_image, image, rtol=1e-6, atol=1e-8)

  def test_homodyne_late_samples(self):
    # Sampled region at the end of the axis.
    kspace = self.kspace.copy()
    kspace[:25] = 0
    image, _ = recon_ops.reconstruct_homodyne(kspace)
    expected_image, _ = _np_homodyne(kspace, 0)
    self.assertAllClose(expected_image, image, rtol=1e-6, atol=1e-8)
    self.assertRelativeError(self.magnitude, image, 0.03)

  def test_homodyne_accuracy(self):
    image, phase = recon_ops.reconstruct_homodyne(self.partial_kspace)
    self.assertEqual(tf.float64, image.dtype)
    self.assertEqual(tf.float64, phase.dtype)
    self.assertAllEqual([63, 63], image.shape)
    self.assertRelativeError(self.magnitude, image, 0.03)

    # Zero-filling loses the plateau edges and fails every accuracy bound in
    # this test case.
    zerofill, _ = recon_ops.reconstruct_homodyne(self.partial_kspace,
                                                 method='zerofill')
    zerofill_error = _relative_error(self.magnitude, zerofill.numpy())
    self.assertGreater(zerofill_error, 0.04)
    self.assertLess(_relative_error(self.magnitude, image.numpy()),
                    zerofill_error)

  def test_output_is_centered(self):
    image, _ = recon_ops.reconstruct_homodyne(self.partial_kspace)
    peak = np.unravel_index(np.argmax(image), self.magnitude.shape)
    expected_peak = np.unravel_index(np.argmax(self.magnitude),
                                     self.magnitude.shape)
    self.assertAllClose(expected_peak, peak, atol=1)

  def test_phase_range(self):
    _, phase = recon_ops.reconstruct_homodyne(self.partial_kspace)
    self.assertAllInRange(phase, -np.pi, np.pi)

  def test_pocs_matches_reference(self):
    image, _ = recon_ops.reconstruct_homodyne(self.partial_kspace,
                                              method='pocs', max_iter=5)
    expected = _np_pocs(self.partial_kspace, 0, 5)
    self.assertAllClose(expected, image, rtol=1e-6, atol=1e-8)

  def test_pocs_accuracy(self):
    image, _ = recon_ops.reconstruct_homodyne(self.partial_kspace,
                                              method='pocs', max_iter=30)
    self.assertAllGreaterEqual(image, 0.0)
    self.assertRelativeError(self.magnitude, image, 0.04)

  def test_pocs_single_iteration(self):
    # The first iteration gives the zero-filled magnitude.
    image, _ = recon_ops.reconstruct_homodyne(self.partial_kspace,
                                              method='pocs', max_iter=1)
    expected, _ = recon_ops.reconstruct_homodyne(self.partial_kspace,
                                                 method='zerofill')
    self.assertAllClose(expected, image)

  @parameterized.parameters((63, 63), (64, 64))
  def test_pocs_close_to_homodyne(self, rows, cols):  # pylint: disable=missing-param-doc
    # Both methods agree on a smooth object at the default number of
    # iterations, on odd and even grids.
    _, image = test_util.phantom([rows, cols], background=0.1, plateau=0.0)
    kspace = _truncate(test_util.centered_fftn(image), 0, int(0.6 * rows) + 1)
    homodyne, _ = recon_ops.reconstruct_homodyne(kspace)
    pocs, _ = recon_ops.reconstruct_homodyne(kspace, method='pocs')
    self.assertRelativeError(homodyne, pocs, 0.03)

  def test_least_squares_matches_reference(self):
    magnitude, image = test_util.phantom([9, 7])
    kspace = _truncate(test_util.centered_fftn(image), 0, 6)
    result, _ = recon_ops.reconstruct_homodyne(
        kspace, method='least-squares', max_iter=300, regularization=0.1,
        damping=0.01, tol=1e-12)
    expected = _np_least_squares(kspace, 0, regularization=0.1, damping=0.01)
    self.assertAllClose(expected, result, rtol=1e-5, atol=1e-5 * np.max(
        magnitude))

  def test_least_squares_accuracy(self):
    image, _ = recon_ops.reconstruct_homodyne(self.partial_kspace,
                                              method='lstsq', max_iter=50)
    self.assertRelativeError(self.magnitude, image, 0.04)

  @parameterized.parameters('lstsq', 'least_squares', 'LEAST-SQUARES',
                            recon_ops.Method.LEAST_SQUARES)
  def test_least_squares_aliases(self, method):  # pylint: disable=missing-param-doc
    image, _ = recon_ops.reconstruct_homodyne(self.partial_kspace,
                                              method=method, max_iter=3)
    expected, _ = recon_ops.reconstruct_homodyne(self.partial_kspace,
                                                 method='least-squares',
                                                 max_iter=3)
    self.assertAllClose(expected, image)

  def test_zerofill(self):
    image, _ = recon_ops.reconstruct_homodyne(self.partial_kspace,
                                              method='zerofill')
    expected = np.abs(np.fft.fftshift(_np_ifftn(self.partial_kspace)))
    self.assertAllClose(expected, image)

  @parameterized.parameters('homodyne', 'pocs', 'least-squares', 'zerofill')
  def test_preserve_phase(self, method):  # pylint: disable=missing-param-doc
    image, phase = recon_ops.reconstruct_homodyne(self.partial_kspace,
                                                  method=method)
    complex_image, complex_phase = recon_ops.reconstruct_homodyne(
        self.partial_kspace, method=method, preserve_phase=True)
    self.assertEqual(tf.complex128, complex_image.dtype)
    self.assertAllClose(phase, complex_phase)
    self.assertAllClose(image.numpy() * np.exp(1j * phase.numpy()),
                        complex_image)

  def test_smooth_phase(self):
    _, phase = recon_ops.reconstruct_homodyne(self.partial_kspace,
                                              smooth_phase=True)
    _, low_pass = _np_filters(self.partial_kspace != 0, 0, 'cubic')
    sine = np.sin(np.linspace(0, np.pi, 63)).reshape([1, -1])
    expected = np.fft.fftshift(
        _np_phase(self.partial_kspace, low_pass * sine))
    self.assertPhaseClose(expected, phase)

  def test_complex64(self):
    kspace = self.partial_kspace.astype(np.complex64)
    image, phase = recon_ops.reconstruct_homodyne(kspace)
    self.assertEqual(tf.float32, image.dtype)
    self.assertEqual(tf.float32, phase.dtype)
    expected_image, _ = _np_homodyne(self.partial_kspace, 0)
    self.assertAllClose(expected_image, image, rtol=1e-3, atol=1e-3 * np.max(
        self.magnitude))

  def test_3d_singleton_slice(self):
    kspace = self.partial_kspace[..., np.newaxis]
    image, phase = recon_ops.reconstruct_homodyne(kspace)
    expected_image, expected_phase = recon_ops.reconstruct_homodyne(
        self.partial_kspace)
    self.assertAllEqual([63, 63, 1], image.shape)
    self.assertAllClose(expected_image[..., tf.newaxis], image)
    self.assertPhaseClose(expected_phase.numpy()[..., np.newaxis], phase)

  def test_single_coil(self):
    kspace = self.partial_kspace[..., np.newaxis, np.newaxis]
    image, _ = recon_ops.reconstruct_homodyne(kspace)
    self.assertAllEqual([63, 63, 1], image.shape)

  def test_3d(self):
    magnitude, image = test_util.phantom([16, 16, 15])
    kspace = _truncate(test_util.centered_fftn(image), 2, 12)
    result, phase = recon_ops.reconstruct_homodyne(kspace)
    self.assertAllEqual([16, 16, 15], result.shape)
    self.assertAllEqual([16, 16, 15], phase.shape)
    expected, _ = _np_homodyne(kspace, 2)
    self.assertAllClose(expected, result, rtol=1e-6, atol=1e-8)
    self.assertRelativeError(magnitude, result, 0.1)

  def test_multicoil(self):
    kspace = np.stack([self.partial_kspace] * 2, axis=-1)[:, :, np.newaxis]
    with self.assertRaises(errors.InputShapeError):
      recon_ops.reconstruct_homodyne(kspace)

  def test_invalid_rank(self):
    with self.assertRaises(errors.InputShapeError):
      recon_ops.reconstruct_homodyne(self.partial_kspace[0])

  def test_gap(self):
    kspace = self.partial_kspace.copy()
    kspace[10] = 0
    with self.assertRaises(errors.SamplingError):
      recon_ops.reconstruct_homodyne(kspace)

  @parameterized.product(method=['homodyne', 'pocs', 'lstsq', 'zerofill'],
                         window=['step', 'ramp', 'quad', 'cube', 'quartic'])
  def test_fully_sampled(self, method, window):  # pylint: disable=missing-param-doc
    with self.assertRaises(errors.FullySampledError):
      recon_ops.reconstruct_homodyne(self.kspace, method=method, window=window)

  def test_invalid_method(self):
    with self.assertRaisesRegex(errors.ConfigError, "method"):
      recon_ops.reconstruct_homodyne(self.partial_kspace, method='grappa')

  def test_invalid_window(self):
    with self.assertRaisesRegex(errors.ConfigError, "window"):
      recon_ops.reconstruct_homodyne(self.partial_kspace, window='hamming')

  def test_invalid_max_iter(self):
    with self.assertRaises(errors.ConfigError):
      recon_ops.reconstruct_homodyne(self.partial_kspace, max_iter=0)
    with self.assertRaises(TypeError):
      recon_ops.reconstruct_homodyne(self.partial_kspace, max_iter=2.5)

  def test_numpy_max_iter(self):
    image, _ = recon_ops.reconstruct_homodyne(self.partial_kspace,
                                              method='pocs',
                                              max_iter=np.int64(3))
    expected, _ = recon_ops.reconstruct_homodyne(self.partial_kspace,
                                                 method='pocs', max_iter=3)
    self.assertAllClose(expected, image)

  def test_options_validated_before_data(self):
    # An invalid method is reported even if k-space is fully sampled.
    with self.assertRaises(errors.ConfigError):
      recon_ops.reconstruct_homodyne(self.kspace, method='grappa')


class EstimatePhaseTest(PhaseTestCase):
  """Tests for op `estimate_phase`."""
  def test_estimate_phase(self):
    _, image = test_util.phantom([15, 12])
    kspace = _truncate(test_util.centered_fftn(image), 0, 10)
    _, low_pass = _np_filters(kspace != 0, 0, 'linear')
    phase = recon_ops.estimate_phase(kspace, low_pass.ravel(), 0)
    self.assertPhaseClose(_np_phase(kspace, low_pass), phase)


if __name__ == '__main__':
  tf.test.main()
