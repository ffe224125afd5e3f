"""Optional compilation of ``atmointerp._cykernels``.

Project metadata lives in pyproject.toml. ``pip install .`` gives the pure
Python package; ``python setup.py build_ext --inplace`` adds the compiled
bracket scan and Neville kernels used by the "cython" backend.
"""

import sys

from setuptools import Extension, setup


def _cykernels_extension():
    try:
        import numpy
        from Cython.Build import cythonize
    except ImportError as exc:
        raise SystemExit("build_ext needs numpy and Cython: pip install 'atmointerp[cython]'") from exc

    kernels = Extension(
        "atmointerp._cykernels",
        sources=["src/atmointerp/_cykernels.pyx"],
        include_dirs=[numpy.get_include()],
    )
    return cythonize([kernels], compiler_directives={"language_level": "3", "boundscheck": False})


setup(ext_modules=_cykernels_extension() if "build_ext" in sys.argv else [])
