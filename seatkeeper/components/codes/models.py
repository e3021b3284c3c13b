"""
Codes component - Constants.

Codes are 8 symbols from A-Z and 0-9 (36**8, roughly 2**41 combinations),
short enough to read out loud or type from an email.
"""

import string

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8
