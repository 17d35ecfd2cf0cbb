from typing import Optional

from pydantic import BaseModel, Field


# A missing or blank url is rejected by the resolver with a 400, like any other bad URL
class SaveRequest(BaseModel):
    url: Optional[str] = Field(None, description="Absolute http(s) URL to save.")
    source_client: str = "browser_extension"
    source_platform: str = "chrome"


class ManualAddRequest(BaseModel):
    url: Optional[str] = Field(None, description="Absolute http(s) URL to add.")
