"""Test package structure and imports."""


def test_package_imports() -> None:
    """Test that wpactrl package can be imported."""
    import wpactrl

    assert wpactrl.__version__ == "0.1.0"
    assert wpactrl.ControlSession is not None


def test_main_module_imports() -> None:
    """Test that main module can be imported without error."""
    from wpactrl.__main__ import main

    # Should be able to import the main function
    assert callable(main)
