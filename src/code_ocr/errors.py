"""
Error types for the code OCR pipeline.

Image enhancement reports malformed buffers and out-of-range settings as
InvalidInputError. The preset catalog and the language pattern table report
bad definitions or unknown names as ConfigurationError. Classification has
no error channel.
"""


class CodeOCRError(Exception):
    """Base exception for code OCR errors"""
    def __init__(self, message, error_code, details=None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        """Convert error to JSON-serializable dict"""
        return {
            "success": False,
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details
        }


class InvalidInputError(CodeOCRError, ValueError):
    """Malformed pixel buffer or enhancement setting out of range"""
    def __init__(self, message, details=None):
        super().__init__(
            message=message,
            error_code="INVALID_INPUT",
            details=details
        )


class ConfigurationError(CodeOCRError, ValueError):
    """Bad static configuration: invalid pattern table or unknown preset"""
    def __init__(self, message, details=None):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details=details
        )
