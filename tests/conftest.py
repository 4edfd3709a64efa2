pytest_plugins = [
    'tests.fixtures.statements',
    'tests.fixtures.values',
    'tests.fixtures.sqlite',
]
