"""
Shared constants for the Remove-BG pipeline
"""

# S3 key prefixes
INPUT_PREFIX = "remove-bg/"
OUTPUT_PREFIX = "clean/"

# Supported source extensions (compared lowercase)
SUPPORTED_EXTENSIONS = ['.jpg', '.jpeg', '.png']

# Output object
OUTPUT_EXTENSION = ".png"
OUTPUT_CONTENT_TYPE = "image/png"

# PhotoRoom segment API
PHOTOROOM_API_URL = "https://sdk.photoroom.com/v1/segment"
PHOTOROOM_OUTPUT_FORMAT = "png"
PHOTOROOM_BG_COLOR = "white"

# Value of the processed-by metadata field
PROCESSOR_ID = "lambda-remove-background"

# Environment variable holding the PhotoRoom credential
API_KEY_ENV_VAR = "PHOTOROOM_API_KEY"
