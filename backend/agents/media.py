import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from models.agents import AgentResult
from models.requests import ContentCategory, VerificationRequest

from .base import BaseAgent

EDITING_SOFTWARE = re.compile(r"photoshop|gimp|lightroom|snapseed|facetune|pixlr|edited", re.IGNORECASE)
VIDEO_EDITORS = re.compile(r"premiere|final cut|davinci|after effects|capcut|imovie|ffmpeg|lavf", re.IGNORECASE)


def _first(metadata: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = metadata.get(key)
        if value not in (None, ""):
            return value
    return None


def _naive_utc(value: datetime) -> datetime:
    # EXIF times carry no zone; offset-aware times are shifted to UTC so both compare
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None)


def _parse_time(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return _naive_utc(value)
    if not isinstance(value, str):
        return None
    # EXIF writes dates as 2023:05:01 12:00:00
    text = value.strip()
    if re.match(r"^\d{4}:\d{2}:\d{2}", text):
        text = text.replace(":", "-", 2)
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return _naive_utc(parsed)


class MediaMetadataAgent(BaseAgent):
    """Capture metadata checks for images (EXIF) and videos (container metadata)."""

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        if not request.media_url and not request.media_metadata:
            raise self.not_applicable("no media supplied")

        metadata = request.media_metadata
        if not metadata:
            return self.result(0.5, 0.3, ["no_metadata"])

        if request.category == ContentCategory.VIDEO:
            score, indicators = self._video(metadata)
        else:
            score, indicators = self._image(metadata)

        confidence = min(0.8, 0.4 + 0.05 * len(metadata))
        return self.result(score, confidence, indicators)

    @staticmethod
    def _image(metadata: Dict[str, Any]):
        score = 0.0
        indicators = []

        captured = _first(metadata, "DateTimeOriginal", "dateTimeOriginal", "dateTime", "DateTime", "createdAt")
        if captured is None:
            score += 0.25
            indicators.append("missing_timestamp")

        software = _first(metadata, "Software", "software")
        if software and EDITING_SOFTWARE.search(str(software)):
            score += 0.4
            indicators.append("edited_with_software")

        modified = _parse_time(_first(metadata, "ModifyDate", "modifyDate"))
        captured_at = _parse_time(captured)
        if modified and captured_at and modified > captured_at:
            score += 0.2
            indicators.append("modified_after_capture")

        gps = _first(metadata, "gps", "GPS")
        if gps is not None and not MediaMetadataAgent._valid_gps(gps):
            score += 0.2
            indicators.append("invalid_gps_data")

        return score, indicators

    @staticmethod
    def _video(metadata: Dict[str, Any]):
        score = 0.0
        indicators = []

        duration = _first(metadata, "duration", "Duration")
        uploaded = _first(metadata, "uploadDate", "upload_date")
        if duration is None and uploaded is None:
            score += 0.3
            indicators.append("missing_critical_metadata")

        editor = _first(metadata, "editedWith", "encoder", "Encoder", "software")
        if editor and (metadata.get("editedWith") or VIDEO_EDITORS.search(str(editor))):
            score += 0.4
            indicators.append("video_edited")

        uploaded_at = _parse_time(uploaded)
        created_at = _parse_time(_first(metadata, "createdDate", "creation_time"))
        if uploaded_at and created_at and uploaded_at < created_at:
            score += 0.3
            indicators.append("timestamp_inconsistency")

        return score, indicators

    @staticmethod
    def _valid_gps(gps: Any) -> bool:
        if not isinstance(gps, dict):
            return False
        try:
            lat = float(gps.get("latitude", gps.get("lat")))
            lon = float(gps.get("longitude", gps.get("lon", gps.get("lng"))))
        except (TypeError, ValueError):
            return False
        if lat == 0.0 and lon == 0.0:
            return False
        return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0
