from email_validator import EmailNotValidError, validate_email
from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField
from wtforms.validators import DataRequired, Email, Length, Optional


def sanitize_input(text):
    """Trim surrounding whitespace from user input"""
    if not isinstance(text, str):
        return text
    return text.strip()


def normalize_email(text):
    """Emails are stored trimmed and lowercased"""
    if not isinstance(text, str):
        return text
    return text.strip().lower()


def clean_email_list(values):
    """
    Normalize a list of addresses, dropping duplicates.

    Returns:
        tuple: (valid addresses in input order, rejected values)
    """
    valid = []
    invalid = []
    for value in values:
        if not isinstance(value, str):
            invalid.append(value)
            continue

        email = normalize_email(value)
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            invalid.append(value)
            continue
        if email not in valid:
            valid.append(email)
    return valid, invalid


class EntryForm(FlaskForm):
    entry_name = StringField(
        "Entry name",
        validators=[
            DataRequired(message="Entry name is required"),
            Length(max=100, message="Entry name cannot exceed 100 characters"),
        ],
        filters=[sanitize_input],
    )
    email = StringField(
        "Email",
        validators=[
            DataRequired(message="Valid email is required"),
            Email(message="Valid email is required"),
        ],
        filters=[normalize_email],
    )


class FeedbackForm(FlaskForm):
    message = TextAreaField(
        "Message",
        validators=[
            DataRequired(message="Message required"),
            Length(max=5000, message="Message cannot exceed 5000 characters"),
        ],
        filters=[sanitize_input],
    )
    email = StringField(
        "Email",
        validators=[Optional(), Email(message="Valid email is required")],
        filters=[normalize_email],
    )
