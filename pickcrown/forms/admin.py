from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Email, Length, NumberRange, Optional

from pickcrown.forms.entries import normalize_email, sanitize_input
from pickcrown.models.event import EVENT_STATUSES, EVENT_TYPES


class EventForm(FlaskForm):
    name = StringField(
        "Event name",
        validators=[DataRequired(message="Event name is required"), Length(max=200)],
        filters=[sanitize_input],
    )
    year = IntegerField(
        "Year",
        validators=[
            DataRequired(message="Year is required"),
            NumberRange(min=1900, max=3000, message="Year must be between 1900 and 3000"),
        ],
    )
    event_type = StringField(
        "Event type",
        default="pick_one",
        validators=[Optional(), AnyOf(EVENT_TYPES, message="Invalid event type")],
    )
    start_time = StringField("Start time", validators=[Optional()])
    status = StringField(
        "Status",
        default="upcoming",
        validators=[Optional(), AnyOf(EVENT_STATUSES, message="Invalid status")],
    )


class PoolForm(FlaskForm):
    event_id = IntegerField(
        "Event", validators=[DataRequired(message="Event is required")]
    )
    name = StringField(
        "Pool name",
        validators=[DataRequired(message="Pool name is required"), Length(max=200)],
        filters=[sanitize_input],
    )
    commissioner_name = StringField(
        "Commissioner name",
        validators=[Optional(), Length(max=100)],
        filters=[sanitize_input],
    )
    commissioner_email = StringField(
        "Commissioner email",
        validators=[Optional(), Email(message="Valid email is required")],
        filters=[normalize_email],
    )


class SeasonForm(FlaskForm):
    name = StringField(
        "Name",
        validators=[DataRequired(message="Name is required"), Length(max=100)],
        filters=[sanitize_input],
    )
    description = TextAreaField(
        "Description", validators=[Optional(), Length(max=1000)]
    )
    year = IntegerField("Year", validators=[Optional(), NumberRange(min=1900, max=3000)])


class RoundForm(FlaskForm):
    eventId = IntegerField("Event", validators=[DataRequired("All fields required")])
    name = StringField(
        "Round name",
        validators=[DataRequired("All fields required"), Length(max=100)],
        filters=[sanitize_input],
    )
    round_order = IntegerField(
        "Round order", validators=[DataRequired("All fields required")]
    )
    points = IntegerField(
        "Points",
        validators=[DataRequired("All fields required"), NumberRange(min=1)],
    )


class CommissionerForm(FlaskForm):
    name = StringField(
        "Name",
        validators=[DataRequired("Name and email are required"), Length(max=100)],
        filters=[sanitize_input],
    )
    email = StringField(
        "Email",
        validators=[
            DataRequired("Name and email are required"),
            Email(message="Valid email is required"),
        ],
        filters=[normalize_email],
    )
