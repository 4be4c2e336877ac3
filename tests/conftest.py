pytest_plugins = ["sqlgolden.pytest_plugin", "pytester"]
