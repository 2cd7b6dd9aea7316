"""
Shared constants across the URL extraction pipeline.
Only for values used across multiple components.
"""

# Serialized field order for the full-record view; empty fields are omitted
RECORD_FIELDS = (
    "scheme",
    "opaque",
    "user",
    "host",
    "path",
    "raw_path",
    "raw_query",
    "fragment",
    "raw_fragment",
)

# Indentation of the full-record JSON view
RECORD_JSON_INDENT = 2

# Sub-delims and brackets that a host (or IPv6 zone) may carry unescaped
HOST_SAFE = frozenset("!$&'()*+,;=:[]<>\"")

# Characters accepted in a raw user-info segment besides ASCII letters and digits
USERINFO_SAFE = frozenset("-._:~!$&'()*+,;=%@")

# Characters allowed after the first letter of a scheme
SCHEME_EXTRA = frozenset("+-.")

UPPER_HEX = "0123456789ABCDEF"

# Reasons for dropping records during processing
DROP_REASONS = {
    'EMPTY_URL': 'empty url',
    'CONTROL_CHARACTER': 'invalid control character in URL',
    'MISSING_SCHEME': 'missing protocol scheme',
    'NOT_REQUEST_URI': 'invalid URI for request',
    'INVALID_USERINFO': 'invalid userinfo',
    'MISSING_BRACKET': "missing ']' in host",
    'SEMICOLON_IN_QUERY': 'invalid semicolon separator in query',
    'NOT_VALID_URL': 'not valid url',
}

# Stage names used in diagnostics and stats
STAGE_PARSE = "parse"
STAGE_VALIDATE = "validate"
STAGE_QUERY = "query"
