class ValidationError(Exception):
    """Exception raised when a field value does not match its schema.
    NOTE: Messages in these errors name the offending field and value, and are safe to show to the caller. """
    
    def __init__(self, message: str, field_name: str | None = None) -> None:
        self.message = message
        self.field_name = field_name
        super().__init__(self.message)
