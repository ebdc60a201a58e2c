#!/usr/bin/env python
"""
Run the test suite of every backoffice app with Django's test runner
Usage: python run_tests.py [app.label ...]
"""
import os
import sys

import django
from django.conf import settings
from django.test.utils import get_runner

APPS = [
    'backoffice.core',
    'backoffice.contacts',
    'backoffice.products',
    'backoffice.estimates',
    'backoffice.invoices',
    'backoffice.files',
    'backoffice.woocommerce',
    'backoffice.client',
]

if __name__ == "__main__":
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'backoffice.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    failures = test_runner.run_tests(sys.argv[1:] or APPS)
    sys.exit(bool(failures))
