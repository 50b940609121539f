"""
API Key schemas for request/response validation
"""
from pydantic import BaseModel


class APIKeyResponse(BaseModel):
    """Schema for API key response (only shown once)"""
    user_id: str
    api_key: str
    message: str = "Store this API key securely. It will not be shown again."
