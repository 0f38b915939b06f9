class SetupError(Exception):
    """Exception raised for configuration errors: missing connection settings, or document classes that can't be registered."""
    
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)
