"""Alternative FFT engines.

Backends pull in optional dependencies, so they are not imported here.
Import explicitly, e.g.:
    from dhmlib.backends.torch_fft import TorchFFT
"""
