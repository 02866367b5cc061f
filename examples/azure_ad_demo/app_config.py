from dotenv import load_dotenv

from azure_ad_verification import AuthExtension, TokenValidator, ValidationOptions

load_dotenv()

# Reads AZURE_AD_TENANT_ID, AZURE_AD_AUDIENCE, AZURE_AD_REQUIRED_SCOPES, ...
access_options = ValidationOptions.from_env()
access_validator = TokenValidator(access_options)

# auth will be the ext imported in the Flask app
auth = AuthExtension(validator=access_validator)
