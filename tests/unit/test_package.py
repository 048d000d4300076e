"""
Unit tests for the package's public surface.

Importing the package pulls in every module, so this also checks that all
module-level annotations evaluate on the oldest supported interpreter.
"""

import importlib

import pytest

import mtxmult

MODULES = [
    "mtxmult.benchmark",
    "mtxmult.cli",
    "mtxmult.config",
    "mtxmult.errors",
    "mtxmult.log",
    "mtxmult.matrix",
    "mtxmult.parallel",
    "mtxmult.tiling",
]


class TestPackage:
    @pytest.mark.parametrize("name", MODULES)
    def test_module_imports(self, name):
        assert importlib.import_module(name) is not None

    def test_public_names_resolve(self):
        """Every name in __all__ is importable from the package root."""
        for name in mtxmult.__all__:
            assert hasattr(mtxmult, name), name

    def test_locked_accumulation_runs(self):
        """The per-tile lock path is callable end to end."""
        config = mtxmult.HarnessConfig(accumulation=mtxmult.Accumulation.LOCKED)
        c = mtxmult.mt_multiply(mtxmult.Matrix.ones(4), mtxmult.Matrix.ones(4), 2, config)
        assert c == mtxmult.Matrix.st_multiply(mtxmult.Matrix.ones(4), mtxmult.Matrix.ones(4))
