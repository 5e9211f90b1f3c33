import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from agents.claims import CitedSourceCredibilityAgent, SensationalLanguageAgent
from agents.media import MediaMetadataAgent
from agents.network import DeviceFingerprintAgent, NetworkAnalysisAgent, hash_identifier
from agents.review import (
    DuplicateContentAgent,
    RatingDistributionAgent,
    ReviewLexicalAgent,
    ReviewTimingAgent,
    SubmitterBehaviorAgent,
)
from models.agents import ErrorKind, ScoreDirection
from models.requests import ContentCategory, VerificationRequest

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
DESKTOP_CHROME = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/122.0 Safari/537.36"
IPHONE_SAFARI = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) Mobile/15E148 Safari/604.1"


async def run(agent_cls, request):
    agent = agent_cls("under_test")
    return await agent.analyze(request, asyncio.get_running_loop().time() + 5.0)


def make_review(text="Decent app", related=None, submitter=None, **review):
    return VerificationRequest(
        category=ContentCategory.REVIEW,
        review={"text": text, **review},
        related_reviews=related or [],
        submitter=submitter,
    )


def assert_not_applicable(result):
    assert result.succeeded is False
    assert result.error_kind == ErrorKind.AGENT_NOT_APPLICABLE


@pytest.mark.asyncio
class TestReviewLexicalAgent:

    async def test_template_phrasing(self):
        result = await run(ReviewLexicalAgent, make_review(
            "Great app! Highly recommend, easy to use and works perfectly."
        ))
        assert result.score == pytest.approx(0.25)
        assert result.indicators == ["template_phrasing"]

    async def test_llm_style_phrasing(self):
        result = await run(ReviewLexicalAgent, make_review(
            "As a user, I highly recommend this app. In conclusion, overall I am impressed."
        ))
        assert "gpt_style_phrasing" in result.indicators
        assert result.score == pytest.approx(0.35)

    async def test_spam(self):
        result = await run(ReviewLexicalAgent, make_review("Use promo code SAVE50 at checkout for a discount"))
        assert result.indicators == ["spam_keywords"]

    async def test_plain_review(self):
        result = await run(ReviewLexicalAgent, VerificationRequest(
            category=ContentCategory.REVIEW,
            review={"text": "Sync broke after the last update but support fixed it within a day."},
        ))
        assert result.score == 0.0
        assert result.indicators == []
        assert 0.5 < result.confidence <= 0.9

    async def test_short_text(self):
        result = await run(ReviewLexicalAgent, make_review("ok"))
        assert (result.score, result.confidence) == (0.5, 0.4)
        assert result.indicators == ["text_too_short"]

    async def test_without_text(self, image_request):
        assert_not_applicable(await run(ReviewLexicalAgent, image_request))

    async def test_reports_elapsed(self):
        result = await run(ReviewLexicalAgent, make_review("Works as advertised"))
        assert result.elapsed >= 0.0
        assert result.agent_id == "under_test"


@pytest.mark.asyncio
class TestReviewTimingAgent:

    async def test_burst(self):
        related = [{"created_at": T0 + timedelta(minutes=5 * i), "user_id": f"u{i}"} for i in range(10)]
        result = await run(ReviewTimingAgent, make_review(related=related))

        assert result.indicators == ["review_burst"]
        assert result.confidence == pytest.approx(0.6)

    async def test_same_minute_cluster(self):
        related = [{"created_at": T0 + timedelta(seconds=i)} for i in range(5)]
        result = await run(ReviewTimingAgent, make_review(related=related))
        assert result.indicators == ["same_minute_cluster"]

    async def test_coordinated_campaign(self):
        related = [
            {"created_at": T0, "user_id": "u0"},
            {"created_at": T0 + timedelta(hours=1), "user_id": "u0"},
        ] + [{"created_at": T0 + timedelta(days=k), "user_id": f"u{k}"} for k in range(1, 9)]
        result = await run(ReviewTimingAgent, make_review(related=related))
        assert result.indicators == ["coordinated_campaign"]

    async def test_organic_spread(self):
        related = [{"created_at": T0 + timedelta(days=i), "user_id": f"u{i}"} for i in range(6)]
        result = await run(ReviewTimingAgent, make_review(related=related))
        assert result.score == 0.0

    async def test_too_few_timestamps(self):
        related = [{"created_at": T0}]
        assert_not_applicable(await run(ReviewTimingAgent, make_review(related=related, created_at=T0)))


@pytest.mark.asyncio
class TestRatingDistributionAgent:

    async def test_five_star_flood(self):
        related = [{"rating": 5, "created_at": T0 + timedelta(hours=i)} for i in range(20)]
        result = await run(RatingDistributionAgent, make_review(related=related, rating=5))

        assert result.indicators == ["five_star_concentration", "rating_polarization", "recent_five_star_streak"]
        assert result.score == pytest.approx(0.75)
        assert result.confidence == pytest.approx(0.51)

    async def test_balanced(self):
        related = [{"rating": r} for r in [1, 2, 3, 4, 5, 1, 2, 3, 4]]
        result = await run(RatingDistributionAgent, make_review(related=related, rating=5))
        assert result.score == 0.0

    async def test_too_few_ratings(self):
        related = [{"rating": 5}] * 3
        assert_not_applicable(await run(RatingDistributionAgent, make_review(related=related, rating=5)))


@pytest.mark.asyncio
class TestSubmitterBehaviorAgent:

    async def test_fresh_bulk_single_purpose_account(self):
        request = make_review(
            created_at=T0,
            submitter={
                "account_created_at": T0 - timedelta(hours=2),
                "total_reviews": 80,
                "reviewed_apps": ["com.example.notes"],
            },
        )
        result = await run(SubmitterBehaviorAgent, request)

        assert result.indicators == ["new_account", "bulk_reviewer", "single_purpose_account"]
        assert result.score == pytest.approx(0.65)
        assert result.confidence == pytest.approx(0.9)

    async def test_established_account(self, review_request):
        result = await run(SubmitterBehaviorAgent, review_request)
        assert result.score == 0.0
        assert result.confidence == pytest.approx(0.9)

    async def test_partial_metadata_lowers_confidence(self):
        result = await run(SubmitterBehaviorAgent, make_review(submitter={"total_reviews": 3}))
        assert result.confidence == pytest.approx(0.5)

    async def test_without_submitter(self):
        assert_not_applicable(await run(SubmitterBehaviorAgent, make_review()))

    async def test_submitter_without_behavioral_fields(self):
        assert_not_applicable(await run(SubmitterBehaviorAgent, make_review(submitter={"user_id": "u-1"})))


@pytest.mark.asyncio
class TestDuplicateContentAgent:

    TEXT = "Amazing app, I use it every day for my notes"

    async def test_exact_duplicate(self):
        related = [{"text": "amazing app,  I use it every day for my NOTES"}, {"text": "Crashes on launch"}]
        result = await run(DuplicateContentAgent, make_review(self.TEXT, related=related))

        assert result.indicators == ["exact_duplicate"]
        assert result.score == pytest.approx(0.8)
        assert result.confidence == pytest.approx(0.5)

    async def test_repeated_duplicates_raise_score(self):
        related = [{"text": self.TEXT}, {"text": self.TEXT}, {"text": self.TEXT}]
        result = await run(DuplicateContentAgent, make_review(self.TEXT, related=related))
        assert result.score == pytest.approx(0.9)

    async def test_near_duplicate(self):
        related = [{"text": "the quick brown fox jumps over the lazy dog"}]
        result = await run(DuplicateContentAgent, make_review(
            "the quick brown fox jumps over the lazy dog today", related=related
        ))
        assert result.indicators == ["near_duplicate"]
        assert result.score == pytest.approx(0.6)

    async def test_unique(self):
        related = [{"text": "Battery drain is terrible since the update"}]
        result = await run(DuplicateContentAgent, make_review(self.TEXT, related=related))
        assert result.score == 0.0

    async def test_without_related_reviews(self):
        assert_not_applicable(await run(DuplicateContentAgent, make_review(self.TEXT)))


@pytest.mark.asyncio
class TestNetworkAnalysisAgent:

    @pytest.mark.parametrize("ip,indicator,score", [
        ("52.10.20.30", "datacenter_ip", 0.6),
        ("185.220.101.5", "tor_exit_node", 0.7),
        ("91.214.3.4", "vpn_ip", 0.4),
        ("192.168.1.10", "private_ip", 0.2),
    ])
    async def test_risky_ranges(self, ip, indicator, score):
        result = await run(NetworkAnalysisAgent, make_review(submitter={"ip_address": ip}))
        assert result.indicators == [indicator]
        assert result.score == pytest.approx(score)
        assert result.confidence == pytest.approx(0.7)

    async def test_residential_ip(self, review_request):
        result = await run(NetworkAnalysisAgent, review_request)
        assert result.score == 0.0
        assert result.indicators == []

    async def test_shared_ip(self):
        ip = "81.2.69.160"
        related = [{"ip_hash": hash_identifier(ip), "user_id": f"u{i}"} for i in range(5)]
        result = await run(NetworkAnalysisAgent, make_review(related=related, submitter={"ip_address": ip}))

        assert result.indicators == ["shared_ip"]
        assert result.score == pytest.approx(0.4)

    async def test_review_farm(self):
        ip = "81.2.69.160"
        related = [{"ip_hash": hash_identifier(ip), "user_id": f"u{i % 2}"} for i in range(8)]
        result = await run(NetworkAnalysisAgent, make_review(related=related, submitter={"ip_address": ip}))

        assert result.indicators == ["shared_ip", "review_farm_ip"]
        assert result.score == pytest.approx(0.8)

    async def test_unparseable_ip(self):
        assert_not_applicable(await run(NetworkAnalysisAgent, make_review(submitter={"ip_address": "not-an-ip"})))

    async def test_without_ip(self):
        assert_not_applicable(await run(NetworkAnalysisAgent, make_review()))


@pytest.mark.asyncio
class TestDeviceFingerprintAgent:

    FULL_COMPONENTS = {
        "canvas": "c1", "webgl": "w1", "screen": "2560x1440", "timezone": "UTC",
        "language": "en", "plugins": ["pdf"], "fonts": ["Arial"],
    }

    async def test_scripted_client(self):
        result = await run(DeviceFingerprintAgent, make_review(submitter={"user_agent": "python-requests/2.31"}))
        assert result.indicators == ["bot_user_agent"]
        assert result.confidence == pytest.approx(0.5)

    async def test_headless_browser(self):
        ua = "Mozilla/5.0 (X11; Linux x86_64) HeadlessChrome/120.0 Safari/537.36"
        result = await run(DeviceFingerprintAgent, make_review(submitter={"user_agent": ua}))
        assert "headless_browser" in result.indicators
        assert result.score == 1.0

    async def test_stripped_fingerprint(self):
        submitter = {"user_agent": DESKTOP_CHROME, "device_components": {"screen": "1920x1080", "timezone": "UTC"}}
        result = await run(DeviceFingerprintAgent, make_review(submitter=submitter))
        assert result.indicators == ["headless_browser", "missing_device_components"]
        assert result.confidence == pytest.approx(0.7)

    async def test_mobile_user_agent_with_desktop_screen(self):
        submitter = {"user_agent": IPHONE_SAFARI, "device_components": self.FULL_COMPONENTS}
        result = await run(DeviceFingerprintAgent, make_review(submitter=submitter))
        assert result.indicators == ["device_user_agent_mismatch"]
        assert result.score == pytest.approx(0.4)

    async def test_device_shared_across_accounts(self):
        submitter = {"user_id": "u-1", "user_agent": DESKTOP_CHROME, "device_user_ids": ["u-1", "u-2", "u-3"]}
        result = await run(DeviceFingerprintAgent, make_review(submitter=submitter))
        assert result.indicators == ["device_shared_across_users"]
        assert result.score == pytest.approx(0.4)

    async def test_ordinary_browser(self, review_request):
        result = await run(DeviceFingerprintAgent, review_request)
        assert result.score == 0.0

    async def test_without_device_information(self):
        assert_not_applicable(await run(DeviceFingerprintAgent, make_review(submitter={"user_id": "u-1"})))


@pytest.mark.asyncio
class TestSensationalLanguageAgent:

    async def test_sensational_claim(self):
        request = VerificationRequest(
            category=ContentCategory.CLAIM,
            claim_text="SHOCKING secret revealed! They don't want you to know. Share before it's deleted!!!!",
        )
        result = await run(SensationalLanguageAgent, request)

        assert result.indicators == [
            "sensational_language", "conspiracy_framing", "urgency_pressure", "excessive_punctuation",
        ]
        assert result.score == 1.0

    async def test_neutral_claim(self, claim_request):
        result = await run(SensationalLanguageAgent, claim_request)
        assert result.score == 0.0
        assert result.indicators == []

    async def test_video_transcript(self):
        request = VerificationRequest(
            category=ContentCategory.VIDEO,
            media_url="https://www.youtube.com/watch?v=abc123",
            transcript="Wake up people, this is a cover-up",
        )
        result = await run(SensationalLanguageAgent, request)
        assert result.indicators == ["conspiracy_framing"]
        assert result.score == pytest.approx(0.4)

    async def test_without_text(self, image_request):
        assert_not_applicable(await run(SensationalLanguageAgent, image_request))


@pytest.mark.asyncio
class TestCitedSourceCredibilityAgent:

    async def test_trusted_source(self, claim_request):
        result = await run(CitedSourceCredibilityAgent, claim_request)

        assert result.direction == ScoreDirection.AUTHENTICITY
        assert result.score == pytest.approx(0.92)
        assert result.indicators == ["highly_trusted_sources"]
        assert result.confidence == pytest.approx(0.6)

    async def test_trusted_outlet_is_not_flagged_as_shortener(self):
        request = VerificationRequest(
            category=ContentCategory.CLAIM,
            claim_text="The senate passed the budget bill",
            cited_urls=["https://www.washingtonpost.com/politics/2024/senate-vote/"],
        )
        result = await run(CitedSourceCredibilityAgent, request)
        assert result.indicators == ["highly_trusted_sources"]

    async def test_shortened_citation_is_flagged(self):
        request = VerificationRequest(
            category=ContentCategory.CLAIM,
            claim_text="The senate passed the budget bill",
            cited_urls=["https://bit.ly/3xYzAb"],
        )
        result = await run(CitedSourceCredibilityAgent, request)
        assert result.indicators == ["url_shortener_cited"]
        assert result.score == pytest.approx(0.58)

    async def test_unreliable_source(self):
        request = VerificationRequest(
            category=ContentCategory.CLAIM,
            claim_text="Vaccines contain microchips",
            cited_urls=["https://www.infowars.com/posts/microchips"],
        )
        result = await run(CitedSourceCredibilityAgent, request)
        assert result.indicators == ["unreliable_source_cited", "low_credibility_sources"]
        assert result.score == pytest.approx(0.05)

    async def test_no_sources(self):
        request = VerificationRequest(category=ContentCategory.CLAIM, claim_text="The moon is made of cheese")
        result = await run(CitedSourceCredibilityAgent, request)
        assert (result.score, result.confidence) == (0.4, 0.3)
        assert result.indicators == ["no_sources_cited"]

    async def test_without_claim(self, review_request):
        assert_not_applicable(await run(CitedSourceCredibilityAgent, review_request))


@pytest.mark.asyncio
class TestMediaMetadataAgent:

    async def test_clean_exif(self, image_request):
        result = await run(MediaMetadataAgent, image_request)
        assert result.score == 0.0
        assert result.confidence == pytest.approx(0.55)

    async def test_edited_image(self):
        request = VerificationRequest(
            category=ContentCategory.IMAGE,
            media_url="https://images.example.com/photo.jpg",
            media_metadata={
                "DateTimeOriginal": "2024:02:11 09:30:00",
                "ModifyDate": "2024:02:12 10:00:00",
                "Software": "Adobe Photoshop 25.0",
            },
        )
        result = await run(MediaMetadataAgent, request)
        assert result.indicators == ["edited_with_software", "modified_after_capture"]
        assert result.score == pytest.approx(0.6)

    async def test_aware_and_naive_timestamps_compare(self):
        request = VerificationRequest(
            category=ContentCategory.IMAGE,
            media_metadata={
                "DateTimeOriginal": datetime(2024, 2, 11, 9, 30, tzinfo=timezone.utc),
                "ModifyDate": "2024:02:12 10:00:00",
            },
        )
        result = await run(MediaMetadataAgent, request)
        assert result.succeeded
        assert result.indicators == ["modified_after_capture"]

    async def test_offsets_are_compared_in_utc(self):
        # 10:00+02:00 is 08:00 UTC, an hour before the 09:00 UTC edit
        request = VerificationRequest(
            category=ContentCategory.IMAGE,
            media_metadata={
                "DateTimeOriginal": "2024-02-11T10:00:00+02:00",
                "ModifyDate": "2024-02-11T09:00:00Z",
            },
        )
        result = await run(MediaMetadataAgent, request)
        assert result.indicators == ["modified_after_capture"]

    async def test_missing_timestamp_and_null_island(self):
        request = VerificationRequest(
            category=ContentCategory.IMAGE,
            media_metadata={"Make": "Canon", "gps": {"latitude": 0, "longitude": 0}},
        )
        result = await run(MediaMetadataAgent, request)
        assert result.indicators == ["missing_timestamp", "invalid_gps_data"]
        assert result.score == pytest.approx(0.45)

    async def test_url_without_metadata(self):
        request = VerificationRequest(category=ContentCategory.IMAGE, media_url="https://images.example.com/a.png")
        result = await run(MediaMetadataAgent, request)
        assert result.indicators == ["no_metadata"]
        assert (result.score, result.confidence) == (0.5, 0.3)

    async def test_re_encoded_video(self):
        request = VerificationRequest(
            category=ContentCategory.VIDEO,
            media_url="https://www.youtube.com/watch?v=abc123",
            media_metadata={
                "encoder": "Lavf58.76.100",
                "uploadDate": "2024-01-01T00:00:00",
                "createdDate": "2024-02-01T00:00:00",
            },
        )
        result = await run(MediaMetadataAgent, request)
        assert result.indicators == ["video_edited", "timestamp_inconsistency"]
        assert result.score == pytest.approx(0.7)

    async def test_video_missing_metadata(self):
        request = VerificationRequest(
            category=ContentCategory.VIDEO,
            media_url="https://www.youtube.com/watch?v=abc123",
            media_metadata={"title": "Storm footage"},
        )
        result = await run(MediaMetadataAgent, request)
        assert result.indicators == ["missing_critical_metadata"]

    async def test_without_media(self):
        assert_not_applicable(await run(MediaMetadataAgent, VerificationRequest(category=ContentCategory.IMAGE)))
