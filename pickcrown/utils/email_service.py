"""
Email Service for PickCrown

This module handles all outgoing email:
- Pool invitations
- Pick reminders before an event locks, including nudges for unfinished picks
- Final results once standings are in
- Feedback forwarded to the site owner
"""

import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from flask import current_app

logger = logging.getLogger(__name__)

PLACE_MESSAGES = {
    1: "🥇 Congratulations! You won",
    2: "🥈 Great run! You finished #2 in",
    3: "🥉 Nice work! You finished #3 in",
}


class EmailService:
    """Handles all email sending functionality"""

    def __init__(self):
        self.smtp_server = current_app.config.get("MAIL_SERVER") or "localhost"
        self.smtp_port = current_app.config.get("MAIL_PORT", 587)
        self.smtp_username = current_app.config.get("MAIL_USERNAME")
        self.smtp_password = current_app.config.get("MAIL_PASSWORD")
        self.from_email = current_app.config.get(
            "FROM_EMAIL"
        ) or current_app.config.get("MAIL_USERNAME", "noreply@pickcrown.app")
        self.from_name = current_app.config.get("FROM_NAME", "PickCrown")
        self.use_tls = current_app.config.get("MAIL_USE_TLS", True)
        self.base_url = current_app.config.get("BASE_URL", "").rstrip("/")

    def pool_url(self, pool_id):
        return f"{self.base_url}/pool/{pool_id}"

    def _create_message(self, to_email, subject, body_text, body_html=None):
        """Create email message"""
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email

        msg.attach(MIMEText(body_text, "plain", "utf-8"))

        if body_html:
            msg.attach(MIMEText(body_html, "html", "utf-8"))

        return msg

    def _send_email(self, message):
        """Send email message"""
        try:
            if not self.smtp_username or not self.smtp_password:
                logger.warning("SMTP credentials not configured. Email not sent.")
                return False

            with smtplib.SMTP(self.smtp_server, self.smtp_port) as server:
                if self.use_tls:
                    server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.sendmail(self.from_email, [message["To"]], message.as_string())

            logger.info(f"Email sent successfully to {message['To']}")
            return True

        except Exception as e:
            logger.error(f"Failed to send email to {message['To']}: {str(e)}")
            return False

    def send_pick_reminder(self, pool, event, to_email, deadline):
        """Remind a participant that picks lock soon"""
        pool_url = self.pool_url(pool.id)
        subject = f"🎯 {pool.name} – picks close soon!"

        body_text = f"""
Quick Reminder from {self.from_name}

Hey! Just a friendly nudge – your picks for {pool.name} are due soon.

Event: {event.name}
Picks lock: {deadline}

Once picks lock, you'll be able to see everyone's picks and track the
standings as results come in.

Submit your picks: {pool_url}

Good luck!
""".strip()

        body_html = f"""
        <html>
        <body style="font-family: sans-serif;">
            <h2>👑 Quick Reminder</h2>
            <p>Hey! Just a friendly nudge – your picks for <strong>{html.escape(pool.name)}</strong> are due soon.</p>
            <p><strong>{html.escape(event.name)}</strong><br>⏰ Picks lock: <strong>{deadline}</strong></p>
            <p><a href="{pool_url}">Submit Your Picks →</a></p>
            <p style="font-size: 12px; color: #999;">You're receiving this because you joined a {self.from_name} pool.</p>
        </body>
        </html>
        """

        message = self._create_message(to_email, subject, body_text, body_html)
        return self._send_email(message)

    def send_invite(self, pool, event, to_email, deadline):
        """Invite someone to join a pool"""
        pool_url = self.pool_url(pool.id)
        subject = f"🎯 You're invited to {pool.name}!"

        body_text = f"""
You're Invited!

You've been invited to join {pool.name} for {event.name}.

Picks lock: {deadline}

What to do: open the link below, enter your email, and make your picks
before the deadline. It only takes a few minutes!

Make your picks: {pool_url}

Good luck!
""".strip()

        body_html = f"""
        <html>
        <body style="font-family: sans-serif;">
            <h2>👑 You're Invited!</h2>
            <p>You've been invited to join <strong>{html.escape(pool.name)}</strong> for {html.escape(event.name)}.</p>
            <p>⏰ Picks lock: <strong>{deadline}</strong></p>
            <p><a href="{pool_url}">Make Your Picks →</a></p>
            <p style="font-size: 12px; color: #999;">{self.from_name} - bragging rights only 😄</p>
        </body>
        </html>
        """

        message = self._create_message(to_email, subject, body_text, body_html)
        return self._send_email(message)

    def send_incomplete_reminder(self, pool, event, to_email, deadline):
        """Nudge a participant who started but did not finish their picks"""
        pool_url = self.pool_url(pool.id)
        subject = f"🎯 {pool.name} – don't forget to finish!"

        body_text = f"""
Almost There!

Looks like you started your picks for {pool.name} but haven't finished yet.
No worries – there's still time!

Event: {event.name}
Picks lock: {deadline}

Finish your picks: {pool_url}

See you at the finish line!
""".strip()

        body_html = f"""
        <html>
        <body style="font-family: sans-serif;">
            <h2>👑 Almost There!</h2>
            <p>Looks like you started your picks for <strong>{html.escape(pool.name)}</strong> but haven't finished yet.</p>
            <p><strong>{html.escape(event.name)}</strong><br>⏰ Picks lock: <strong>{deadline}</strong></p>
            <p><a href="{pool_url}">Finish Your Picks →</a></p>
            <p style="font-size: 12px; color: #999;">You're receiving this because you have incomplete picks in a {self.from_name} pool.</p>
        </body>
        </html>
        """

        message = self._create_message(to_email, subject, body_text, body_html)
        return self._send_email(message)

    def send_results(self, pool, event, standing, standings, podium=None):
        """Send a participant the final standings of their pool and the event podium"""
        subject = f"🏆 Final results – {pool.name}"

        rank = standing["rank"]
        if rank in PLACE_MESSAGES:
            headline = f"{PLACE_MESSAGES[rank]} {pool.name} with {standing['total_points']} points!"
        else:
            headline = (
                f"You finished #{rank} of {len(standings)} in {pool.name} "
                f"with {standing['total_points']} points."
            )

        top_lines = "\n".join(
            f"  {row['rank']}. {row['entry_name']} – {row['total_points']} pts"
            for row in standings[:5]
        )

        podium_lines = "\n".join(
            f"  {place['medal']} {place['entry_name']} – {place['total_points']} pts"
            for place in podium or []
        )
        podium_section = f"\n\n{event.name} podium (all pools):\n{podium_lines}" if podium_lines else ""

        body_text = f"""
Hi {standing['entry_name']},

{event.name} is complete.

{headline}

Top of the standings:
{top_lines}{podium_section}

Full standings: {self.pool_url(pool.id)}/standings
""".strip()

        message = self._create_message(standing["email"], subject, body_text)
        return self._send_email(message)

    def send_feedback(self, message_text, sender_email=None):
        """Forward site feedback to the owner"""
        recipient = current_app.config.get("FEEDBACK_EMAIL") or self.from_email
        sender = sender_email or "Anonymous"

        subject = f"💡 {self.from_name} Feedback"
        body_text = f"New Feedback\n\nFrom: {sender}\n\n{message_text}"
        body_html = f"""
        <div style="font-family: sans-serif; padding: 20px;">
            <h2>New Feedback Received</h2>
            <p><strong>From:</strong> {html.escape(sender)}</p>
            <hr>
            <p style="white-space: pre-wrap;">{html.escape(message_text)}</p>
        </div>
        """

        message = self._create_message(recipient, subject, body_text, body_html)
        return self._send_email(message)
