"""Request bodies accepted by the job board API"""

from typing import Any, Optional

from pydantic import BaseModel


class UpdateCacheRequest(BaseModel):
    # Validated by the handler so a bad secret is rejected before the payload is looked at
    jobs: Any = None
    secret: Optional[str] = None
