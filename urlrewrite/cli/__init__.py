"""
urw - command line interface for urlrewrite.

Usage:
    urw check '<rule>'
    urw inspect '<rule>' [--json-output]
    urw eval '<rule>' <url>
    urw apply <url> [--config FILE]
"""

__version__ = "0.1.0"
__cli_name__ = "urw"
