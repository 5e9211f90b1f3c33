from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from utils.fingerprint import content_fingerprint
from utils.validation import InputValidator


class ContentCategory(str, Enum):
    CLAIM = "CLAIM"
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    REVIEW = "REVIEW"


class ReviewContent(BaseModel):
    """The review under verification."""
    model_config = ConfigDict(frozen=True)

    text: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    created_at: Optional[datetime] = None
    app_id: Optional[str] = None

    @field_validator("text")
    @classmethod
    def sanitize_text(cls, v):
        return InputValidator.sanitize_text(v, "review.text")


class SubmitterMetadata(BaseModel):
    """What the platform knows about whoever submitted the review."""
    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    account_created_at: Optional[datetime] = None
    total_reviews: Optional[int] = None
    reviewed_apps: List[str] = Field(default_factory=list)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    device_components: Dict[str, Any] = Field(default_factory=dict)
    device_fingerprint: Optional[str] = None
    device_user_ids: List[str] = Field(default_factory=list)


class RelatedReview(BaseModel):
    """Another review of the same app, used by corpus-level heuristics."""
    model_config = ConfigDict(frozen=True)

    text: Optional[str] = None
    rating: Optional[int] = None
    created_at: Optional[datetime] = None
    user_id: Optional[str] = None
    ip_hash: Optional[str] = None
    device_fingerprint: Optional[str] = None


class VerificationRequest(BaseModel):
    """Immutable request handed to every agent. `content_fingerprint` is derived when omitted."""
    model_config = ConfigDict(frozen=True)

    category: ContentCategory
    content_fingerprint: str = ""

    claim_text: Optional[str] = None
    cited_urls: List[str] = Field(default_factory=list)

    media_url: Optional[str] = None
    media_metadata: Dict[str, Any] = Field(default_factory=dict)
    transcript: Optional[str] = None

    listing_url: Optional[str] = None
    review: Optional[ReviewContent] = None
    submitter: Optional[SubmitterMetadata] = None
    related_reviews: List[RelatedReview] = Field(default_factory=list)

    deadline: Optional[datetime] = None

    @field_validator("claim_text")
    @classmethod
    def sanitize_claim(cls, v):
        return InputValidator.sanitize_text(v, "claim_text", max_length=5000)

    @field_validator("transcript")
    @classmethod
    def sanitize_transcript(cls, v):
        return InputValidator.sanitize_text(v, "transcript")

    @field_validator("media_url", "listing_url")
    @classmethod
    def sanitize_single_url(cls, v, info):
        return InputValidator.sanitize_url(v, info.field_name)

    @field_validator("cited_urls")
    @classmethod
    def sanitize_cited_urls(cls, v):
        urls = [InputValidator.sanitize_url(u, "cited_urls") for u in v]
        return [u for u in urls if u]

    @model_validator(mode="after")
    def derive_fingerprint(self):
        if not self.content_fingerprint:
            object.__setattr__(self, "content_fingerprint", content_fingerprint(self.category, self.fingerprint_content()))
        return self

    def fingerprint_content(self) -> Dict[str, Any]:
        """
        Everything that can change a verdict; the deadline is excluded.
        Text keeps its case: letter case is a signal (shouted claims score differently).
        """
        return self.model_dump(
            mode="json",
            exclude={"category", "content_fingerprint", "deadline"},
            exclude_none=True,
        )

    @property
    def text_under_review(self) -> Optional[str]:
        """The primary free text of the request, whatever its category."""
        if self.category == ContentCategory.CLAIM:
            return self.claim_text
        if self.category == ContentCategory.REVIEW:
            return self.review.text if self.review else None
        if self.category == ContentCategory.VIDEO:
            return self.transcript
        return None
