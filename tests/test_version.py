"""Tests for version information and package exports."""

import gitlab3
from gitlab3.__version__ import __version__, __version_info__


def test_version_is_semver():
    assert len(__version_info__) == 3
    assert ".".join(str(part) for part in __version_info__) == __version__


def test_package_exports():
    assert gitlab3.__version__ == __version__
    for name in gitlab3.__all__:
        assert hasattr(gitlab3, name)
