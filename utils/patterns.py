"""Pre-compiled regex patterns for the funding client tools.

All patterns are compiled once at module import so the validators and
post-filters that run on every keystroke don't recompile them.

Usage:
    from utils.patterns import EMAIL, PROJECT_REFERENCE_ID

    if PROJECT_REFERENCE_ID.match(text):
        ...
"""

import re

# Project reference ids issued by the backend: PROJ-2025-00037
PROJECT_REFERENCE_ID = re.compile(r'^PROJ-\d{4}-\d{5}$')

# Loose email shape check used by the project form (something@host.tld)
EMAIL = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

# Indian mobile/landline numbers are validated on digits only
PHONE_DIGITS = re.compile(r'^[0-9]{10}$')
NON_DIGITS = re.compile(r'\D')

# Whitespace normalization: multiple spaces/tabs/newlines
WHITESPACE = re.compile(r'\s+')

# Currency symbols for stripping during numeric conversion
CURRENCY_SYMBOLS = re.compile(r'[\$€£¥₹₽]')
