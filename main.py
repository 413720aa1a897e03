"""
Slack Webhook Bot - Lambda Entry Point

Serverless bot that:
- Installs itself into workspaces over OAuth
- Receives Events API, slash command and interactivity callbacks
- Fans each payload out to the handlers registered below
"""

import logging

from slack_webhook import SlackWebhook, load_environment

settings = load_environment()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = SlackWebhook(settings)


# ============================================================================
# INSTALL EVENTS
# ============================================================================

@app.on("install_success")
def handle_install(record, bot, storage):
    """Welcome the installer by DM."""
    if not record.installer_id:
        return
    logger.info(f"Team {record.id} installed the bot")
    bot.send(
        "chat.postMessage",
        channel=record.installer_id,
        text="Thanks for installing! Mention me in a channel or use `/bot-help`.",
    )


@app.on("install_error")
def handle_install_error(error, query, storage):
    logger.error(f"Install failed for state {query.get('state')}: {error}")


# ============================================================================
# SLASH COMMANDS
# ============================================================================

@app.on("/bot-help")
def handle_help_command(payload, bot, storage):
    """Show what the bot can do."""
    bot.respond(
        "*Slack Webhook Bot*\n\n"
        "- Mention me in a channel and I'll answer\n"
        "- `/bot-help` shows this message"
    )


# ============================================================================
# EVENT HANDLERS
# ============================================================================

@app.on("app_mention")
def handle_mention(payload, bot, storage):
    """Handle @mentions of the bot."""
    bot.reply("Hi! Use `/bot-help` to see what I can do.")


@app.on("message")
def handle_message(payload, bot, storage):
    """Handle DMs. Only answers humans."""
    event = payload.event
    if event.get("bot_id") or event.get("channel_type") != "im":
        return
    if not event.get("text"):
        return
    bot.reply("DM received. Use `/bot-help` to see what I can do.")


def handler(event, context):
    """AWS Lambda handler."""
    return app.handler(event, context)
