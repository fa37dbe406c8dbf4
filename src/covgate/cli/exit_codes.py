# mirror <sysexits.h>
EXIT_OK = 0  # Normal success
EXIT_GENERIC = 1  # Generic failure (fallback)
EXIT_THRESHOLD = 2  # At least one coverage threshold failed
EXIT_DATAERR = 65  # Coverage input was invalid (e.g., malformed JSON or XML)
EXIT_NOINPUT = 66  # Test root or coverage input not found, or discovery failed
EXIT_CONFIG = 78  # Invalid configuration (e.g., bad pattern or threshold)
