"""
Slack notifier implementation.
"""

import json
import logging
import os
import re
from typing import Dict, Any, List, Optional, Callable
import pandas as pd
from jinja2 import Template, TemplateSyntaxError
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from .base import Notifier
from spendwatch.domain.deviation import TIER_L1, TIER_L2, TIER_L3, TIER_NONE, tier_rank
from spendwatch.shared import TransformableMixin

logger = logging.getLogger(__name__)


class SlackNotifier(Notifier, TransformableMixin):
    """
    Slack notifier for ad spend deviation alerts via the Slack Bot API.

    Messages are rendered from a Jinja2 template that outputs Slack Block Kit
    JSON. Alerts escalate by tier: the entry of ``escalation`` for the
    highest tier present in the data (its contacts and SLA) is passed to the
    template, so an L3 breach can page a different team than an L1 one.

    Template context:
        anomalies: list of row dicts
        count: number of rows
        df: the DataFrame itself
        highest_tier: highest tier in the 'tier' column, or None
        escalation: escalation entry for highest_tier ({} if none configured)
        statistics: summary statistics dict if the payload carries one ({} otherwise)
        plus any template_variables (reserved names are ignored)

    Args:
        recipient: Slack channel ID (e.g. "C01234ABCD") or user ID
                  (e.g. "U01234ABCD", "W01234ABCD")
        template_path: Path to the Jinja2 Block Kit template
        escalation: Optional mapping of tier ('L1', 'L2', 'L3') to a dict
                   such as {'contacts': ['<@U123>'], 'sla': '5 min'}
        template_variables: Optional custom variables for the template
        transformers: Optional transformers to apply before notification

    Note:
        SLACK_BOT_TOKEN must be set in environment variables.
        The bot must have chat:write permission.

    Example:
        notifier = SlackNotifier(
            recipient="C01234ABCD",
            template_path="templates/slack/spend_alert.json",
            escalation={
                "L1": {"contacts": ["<@U01>"], "sla": "5 min"},
                "L3": {"contacts": ["<@U02>", "<@U03>"], "sla": "30 min"},
            },
            transformers={"before": [ValueFilter("is_anomaly", values=[True])]},
        )
    """

    RESERVED_VARIABLES = {"anomalies", "count", "df", "highest_tier", "escalation", "statistics"}
    ESCALATION_TIERS = (TIER_L1, TIER_L2, TIER_L3)

    def __init__(
        self,
        recipient: str,
        template_path: str,
        escalation: Optional[Dict[str, Dict[str, Any]]] = None,
        template_variables: Optional[Dict[str, Any]] = None,
        transformers: Optional[Dict[str, List[Callable]]] = None,
    ):
        if not isinstance(recipient, str):
            raise TypeError("'recipient' must be a string")

        if not recipient.strip():
            raise ValueError("'recipient' cannot be empty")

        self.recipient: str = recipient.strip()
        self._validate_recipient_id(self.recipient)

        self.escalation: dict[str, dict[str, Any]] = self._validate_escalation(escalation)
        self.transformers: dict[str, list[Callable]] = transformers or {}
        self._template_variables: dict[str, Any] = {
            key: value
            for key, value in (template_variables or {}).items()
            if key not in self.RESERVED_VARIABLES
        }

        self._template_content = self._load_and_validate_template(template_path)
        self._template_path = os.path.abspath(template_path)

        self.bot_token: str = os.getenv("SLACK_BOT_TOKEN", "")
        self._validate_bot_token()

        self.client = WebClient(token=self.bot_token)

    def _validate_recipient_id(self, recipient: str) -> None:
        """
        Raises:
            ValueError: If recipient is not a channel ID (C...) or user ID (U.../W...)
        """
        if re.match(r"^C[A-Z0-9]+$", recipient) or re.match(r"^[UW][A-Z0-9]+$", recipient):
            return
        raise ValueError(
            f"Invalid recipient format: '{recipient}'. "
            f"Expected channel ID (C...) or user ID (U.../W...). "
            f"Channel/user names (#channel, @user) are not supported. "
            f"Use the ID from Slack instead."
        )

    def _validate_escalation(
        self, escalation: Optional[Dict[str, Dict[str, Any]]]
    ) -> dict:
        if escalation is None:
            return {}
        if not isinstance(escalation, dict):
            raise TypeError(
                f"'escalation' must be a dict, got {type(escalation).__name__}"
            )
        for tier, entry in escalation.items():
            if tier not in self.ESCALATION_TIERS:
                raise ValueError(
                    f"Invalid escalation tier: '{tier}'. "
                    f"Must be one of: {list(self.ESCALATION_TIERS)}"
                )
            if not isinstance(entry, dict):
                raise TypeError(
                    f"Escalation entry for {tier} must be a dict, "
                    f"got {type(entry).__name__}"
                )
        return dict(escalation)

    def _validate_bot_token(self) -> None:
        """
        Raises:
            ValueError: If the Slack bot token is missing or malformed
        """
        if not self.bot_token:
            raise ValueError(
                "Slack bot token is required. Set SLACK_BOT_TOKEN "
                "environment variable."
            )

        if not self.bot_token.startswith("xoxb-"):
            raise ValueError(
                "Invalid Slack bot token format. Bot tokens must start with "
                "'xoxb-'. Set SLACK_BOT_TOKEN environment variable."
            )

    def _load_and_validate_template(self, template_path: str) -> str:
        """
        Load the template and check that it renders to JSON on empty data.

        Raises:
            ValueError: If template_path is empty or the template is invalid
            FileNotFoundError: If template file does not exist
            PermissionError: If template file is not readable
            RuntimeError: If template file read fails
        """
        if not template_path:
            raise ValueError("template_path cannot be empty")

        abs_path = os.path.abspath(template_path)

        if not os.path.isfile(abs_path):
            raise FileNotFoundError(f"Slack template file not found: {abs_path}")

        if not os.access(abs_path, os.R_OK):
            raise PermissionError(f"Slack template file is not readable: {abs_path}")

        try:
            with open(abs_path, "r", encoding="utf-8") as f:
                template_content = f.read()
        except OSError as e:
            raise RuntimeError(
                f"Failed to read template file '{abs_path}': {str(e)}"
            ) from e

        if not template_content.strip():
            raise ValueError(f"Slack template file is empty: {abs_path}")

        try:
            template = Template(template_content)
        except TemplateSyntaxError as e:
            raise ValueError(
                f"Invalid Jinja2 template syntax: {str(e)}. "
                f"Template file: {abs_path}"
            ) from e

        try:
            rendered = template.render(
                anomalies=[], count=0, df=pd.DataFrame(), highest_tier=None,
                escalation={}, statistics={}, **self._template_variables
            )
            json.loads(rendered)
        except json.JSONDecodeError as e:
            raise ValueError(
                f"Slack template does not render to valid JSON: {str(e)}. "
                f"Template file: {abs_path}"
            ) from e
        except Exception as e:
            raise ValueError(
                f"Failed to validate Slack template: {str(e)}. "
                f"Template file: {abs_path}"
            ) from e

        return template_content

    @staticmethod
    def highest_tier(df: pd.DataFrame) -> Optional[str]:
        """Highest anomaly tier in the 'tier' column, or None."""
        if "tier" not in df.columns:
            return None
        tiers = [t for t in df["tier"].dropna().unique() if t != TIER_NONE]
        if not tiers:
            return None
        return max(tiers, key=tier_rank)

    def notify(self, payload: Dict[str, Any]) -> None:
        """
        Send a Slack message for the deviations in the payload.

        Args:
            payload: Dictionary with an 'anomalies' DataFrame and, optionally,
                    a 'statistics' dict

        Raises:
            ValueError: If payload doesn't contain 'anomalies'
            TypeError: If 'anomalies' is not a DataFrame
            RuntimeError: If rendering or sending the message fails
        """
        if "anomalies" not in payload:
            raise ValueError("Payload must contain 'anomalies' key with DataFrame")

        anomalies_df = payload["anomalies"]

        if not isinstance(anomalies_df, pd.DataFrame):
            raise TypeError(
                f"'anomalies' must be a DataFrame, got "
                f"{type(anomalies_df).__name__}"
            )

        filtered_df = self._apply_transformers(anomalies_df, "before")

        if filtered_df.empty:
            logger.debug("No rows left after transformers; Slack alert skipped")
            return

        blocks = self._generate_message_blocks(
            filtered_df, statistics=payload.get("statistics") or {}
        )
        self._send_message(self.recipient, blocks, self._fallback_text(filtered_df))

    def _fallback_text(self, df: pd.DataFrame) -> str:
        tier = self.highest_tier(df)
        if tier is None:
            return "Ad spend deviation alert"
        return f"Ad spend deviation alert ({tier})"

    def _generate_message_blocks(
        self, df: pd.DataFrame, statistics: Optional[Dict[str, Any]] = None
    ) -> list:
        """
        Render the template into Slack Block Kit blocks.

        Raises:
            RuntimeError: If template rendering or JSON parsing fails, or the
                rendered message has no 'blocks' key
        """
        tier = self.highest_tier(df)
        context = dict(self._template_variables)
        context.update(
            {
                "anomalies": df.to_dict("records"),
                "count": len(df),
                "df": df,
                "highest_tier": tier,
                "escalation": self.escalation.get(tier, {}) if tier else {},
                "statistics": statistics or {},
            }
        )

        try:
            rendered_json = Template(self._template_content).render(**context)
            message_data = json.loads(rendered_json)
        except json.JSONDecodeError as e:
            raise RuntimeError(
                f"Failed to parse rendered template as JSON: {str(e)}. "
                f"Template file: {self._template_path}"
            ) from e
        except Exception as e:
            raise RuntimeError(
                f"Failed to render Slack template: {str(e)}. "
                f"Template file: {self._template_path}"
            ) from e

        if not isinstance(message_data, dict) or "blocks" not in message_data:
            raise RuntimeError(
                "Rendered template must contain a 'blocks' key with Slack "
                f"Block Kit blocks. Template file: {self._template_path}"
            )

        return message_data["blocks"]

    def _send_message(self, recipient_id: str, blocks: list, text: str) -> None:
        """
        Post the message via the Slack Bot API.

        Raises:
            RuntimeError: If message sending fails
        """
        try:
            response = self.client.chat_postMessage(
                channel=recipient_id,
                blocks=blocks,
                text=text,
            )
        except SlackApiError as e:
            error_msg = e.response["error"]

            if error_msg == "channel_not_found":
                raise RuntimeError(
                    f"Channel not found: '{self.recipient}'. "
                    f"Ensure the bot is invited to the channel."
                ) from e
            elif error_msg == "not_in_channel":
                raise RuntimeError(
                    f"Bot is not in channel: '{self.recipient}'. "
                    f"Invite the bot to the channel first."
                ) from e
            elif error_msg == "invalid_auth":
                raise RuntimeError(
                    "Invalid Slack bot token. Check SLACK_BOT_TOKEN "
                    "environment variable."
                ) from e
            raise RuntimeError(f"Failed to send Slack message: {error_msg}") from e

        if not response["ok"]:
            raise RuntimeError(
                f"Slack API returned error: "
                f"{response.get('error', 'Unknown error')}"
            )

        logger.info("Sent Slack alert (%d block(s)) to %s", len(blocks), recipient_id)
