import logging

import requests

logger = logging.getLogger(__name__)


def send_discord_webhook(message: str, webhook_url: str, file_path: str = None, file_label: str = None):
    """
    Send a message (and optional file) to a Discord webhook.
    Args:
        message (str): The message to send.
        webhook_url (str): The Discord webhook URL.
        file_path (str, optional): Path to a file to send as attachment.
        file_label (str, optional): Label for the file (default: filename).
    Returns:
        bool: True when Discord accepted the message.
    """
    data = {"content": message}
    try:
        if file_path:
            with open(file_path, "rb") as f:
                files = {"file": (file_label or file_path, f.read())}
            resp = requests.post(webhook_url, data=data, files=files, timeout=20)
        else:
            resp = requests.post(webhook_url, json=data, timeout=10)
    except (OSError, requests.RequestException) as e:
        logger.error("Failed to send Discord webhook: %s", e)
        return False
    try:
        resp.raise_for_status()
    except requests.HTTPError as e:
        logger.error("Discord webhook returned error: %s", e)
        return False
    logger.info("Sent Discord webhook: %s%s", message, " with file" if file_path else "")
    return True
