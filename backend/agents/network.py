import hashlib
import ipaddress
from typing import Any, Dict

from models.agents import AgentResult
from models.requests import VerificationRequest

from .base import BaseAgent

# sample ranges; a commercial IP reputation feed would replace these
SUSPICIOUS_NETWORKS = [
    (ipaddress.ip_network("3.0.0.0/8"), "datacenter_ip"),
    (ipaddress.ip_network("52.0.0.0/8"), "datacenter_ip"),
    (ipaddress.ip_network("54.0.0.0/8"), "datacenter_ip"),
    (ipaddress.ip_network("104.154.0.0/16"), "datacenter_ip"),
    (ipaddress.ip_network("91.214.0.0/16"), "vpn_ip"),
    (ipaddress.ip_network("185.159.156.0/22"), "vpn_ip"),
]

TOR_EXIT_NETWORKS = [
    ipaddress.ip_network("185.220.0.0/16"),
    ipaddress.ip_network("185.100.0.0/16"),
    ipaddress.ip_network("199.249.0.0/16"),
]

NETWORK_RISK = {
    "datacenter_ip": 0.6,
    "vpn_ip": 0.4,
    "private_ip": 0.2,
    "tor_exit_node": 0.7,
}

BOT_SIGNATURES = (
    "bot", "crawler", "spider", "scraper",
    "headless", "puppeteer", "selenium", "phantomjs",
    "curl", "wget", "python-requests", "python-httpx", "axios", "okhttp", "go-http-client",
)

COMMON_BROWSERS = ("Chrome", "Firefox", "Safari", "Edge", "Opera")

EXPECTED_COMPONENTS = ("canvas", "webgl", "screen", "timezone", "language", "plugins", "fonts")


def hash_identifier(value: str) -> str:
    """Hash used for IP addresses in related-review records."""
    return hashlib.sha256(value.strip().encode("utf-8")).hexdigest()


class NetworkAnalysisAgent(BaseAgent):
    """
    Risk of the submitter's IP address.

    Datacenter, VPN, Tor and private ranges each add risk, and so does the
    same address (compared by `hash_identifier`) appearing on several other
    reviews of the app.
    """

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        raw_ip = request.submitter.ip_address if request.submitter else None
        if not raw_ip:
            raise self.not_applicable("no submitter IP address")
        try:
            address = ipaddress.ip_address(raw_ip.strip())
        except ValueError:
            raise self.not_applicable("unparseable IP address")

        score = 0.0
        indicators = []

        kind = self._classify(address)
        if kind:
            score += NETWORK_RISK[kind]
            indicators.append(kind)

        ip_hash = hash_identifier(raw_ip)
        sharing = [r for r in request.related_reviews if r.ip_hash == ip_hash]
        if len(sharing) >= 10:
            score += 0.6
        elif len(sharing) >= 5:
            score += 0.4
        elif len(sharing) >= 3:
            score += 0.2
        if len(sharing) >= 3:
            indicators.append("shared_ip")
            users = {r.user_id for r in sharing if r.user_id}
            if len(users) > 1 and len(sharing) / len(users) > 3:
                score += 0.4
                indicators.append("review_farm_ip")

        return self.result(score, 0.7, indicators)

    @staticmethod
    def _classify(address) -> str:
        if any(address in network for network in TOR_EXIT_NETWORKS):
            return "tor_exit_node"
        for network, kind in SUSPICIOUS_NETWORKS:
            if address.version == network.version and address in network:
                return kind
        if address.is_private:
            return "private_ip"
        return ""


class DeviceFingerprintAgent(BaseAgent):
    """Bot and headless user agents, stripped fingerprints, devices shared across accounts."""

    async def evaluate(self, request: VerificationRequest, deadline: float) -> AgentResult:
        submitter = request.submitter
        if submitter is None or not (submitter.user_agent or submitter.device_components):
            raise self.not_applicable("no device information")

        user_agent = submitter.user_agent or ""
        components = submitter.device_components
        score = 0.0
        indicators = []

        if self.is_bot(user_agent):
            score += 0.8
            indicators.append("bot_user_agent")
        elif self.is_suspicious_user_agent(user_agent):
            score += 0.5
            indicators.append("unusual_user_agent")

        if self.is_headless(user_agent, components):
            score += 0.7
            indicators.append("headless_browser")

        if components and self.missing_components(components) > 3:
            score += 0.3
            indicators.append("missing_device_components")

        if self.screen_mismatch(user_agent, components):
            score += 0.4
            indicators.append("device_user_agent_mismatch")

        other_users = set(submitter.device_user_ids) - {submitter.user_id}
        if other_users:
            score += 0.2 * len(other_users)
            indicators.append("device_shared_across_users")

        confidence = 0.7 if components else 0.5
        return self.result(score, confidence, indicators)

    @staticmethod
    def is_bot(user_agent: str) -> bool:
        ua = user_agent.lower()
        return any(signature in ua for signature in BOT_SIGNATURES)

    @staticmethod
    def is_suspicious_user_agent(user_agent: str) -> bool:
        if len(user_agent) < 10:
            return True
        if "MSIE 6" in user_agent or "MSIE 7" in user_agent:
            return True
        if "compatible;" in user_agent and "MSIE" not in user_agent:
            return True
        return not any(b in user_agent for b in COMMON_BROWSERS) and "Mobile" not in user_agent

    @staticmethod
    def is_headless(user_agent: str, components: Dict[str, Any]) -> bool:
        ua = user_agent.lower()
        if "headless" in ua or "phantomjs" in ua or "webdriver" in ua:
            return True
        if components and "Chrome" in user_agent:
            return not components.get("canvas") and not components.get("webgl")
        return False

    @staticmethod
    def missing_components(components: Dict[str, Any]) -> int:
        return sum(1 for key in EXPECTED_COMPONENTS if not components.get(key))

    @staticmethod
    def screen_mismatch(user_agent: str, components: Dict[str, Any]) -> bool:
        screen = components.get("screen") if components else None
        if not screen or not user_agent:
            return False
        try:
            width, height = (int(part) for part in str(screen).lower().split("x", 1))
        except ValueError:
            return False
        if "Mobile" in user_agent:
            return width > 1920 or height > 1080
        return width < 800 and height < 600
