"""
Verify package structure and module imports.
Ensures that the modules can be imported without syntax errors,
confirming correct package setup and path configuration.
"""


def test_protocol_imports():
    """Assert that the protocol modules can be imported without syntax errors."""
    try:
        import spark_io.pins
        import spark_io.codec
        import spark_io.models
        import spark_io.router
        success = True
    except ImportError as e:
        success = False
        print(f"Protocol Import Failed: {e}")

    assert success is True


def test_client_imports():
    """Assert that the client modules can be imported without syntax errors."""
    try:
        import spark_io.discovery
        import spark_io.connection
        import spark_io.controller
        import spark_io.main
        success = True
    except ImportError as e:
        success = False
        print(f"Client Import Failed: {e}")

    assert success is True


def test_public_api():
    import spark_io

    assert spark_io.__version__ == "0.1.0"
    assert spark_io.DeviceController.MODES is spark_io.ModeCode
