# /healthapp/forms.py
# Formularios (Flask-WTF) de entrenamientos, métricas y búsqueda.

import datetime as dt

from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, IntegerField, FloatField, DateField, SubmitField
from wtforms.validators import DataRequired, Optional, NumberRange, Length


class WorkoutForm(FlaskForm):
    date = DateField("Date", default=dt.date.today, validators=[DataRequired(message="Date is required.")])
    type = StringField("Type", validators=[DataRequired(message="Type is required."), Length(max=50)])
    duration_min = IntegerField("Duration (minutes)", validators=[
        DataRequired(message="Duration must be a positive number."),
        NumberRange(min=1, message="Duration must be a positive number."),
    ])
    intensity = IntegerField("Intensity (1-5)", default=1, validators=[
        Optional(), NumberRange(min=1, max=5, message="Intensity must be between 1 and 5.")])
    calories = IntegerField("Calories", validators=[
        Optional(), NumberRange(min=0, message="Calories cannot be negative.")])
    notes = TextAreaField("Notes", validators=[Optional(), Length(max=2000)])
    submit = SubmitField("Save")

    def to_fields(self):
        return {
            "date": self.date.data,
            "type": self.type.data.strip(),
            "duration_min": self.duration_min.data,
            "intensity": self.intensity.data or 1,
            "calories": self.calories.data,
            "notes": (self.notes.data or "").strip() or None,
        }


class MetricForm(FlaskForm):
    date = DateField("Date", default=dt.date.today, validators=[DataRequired(message="Date is required.")])
    weight_kg = FloatField("Weight (kg)", validators=[
        Optional(), NumberRange(min=0, message="Weight cannot be negative.")])
    steps = IntegerField("Steps", validators=[Optional(), NumberRange(min=0, message="Steps cannot be negative.")])
    bp_systolic = IntegerField("Blood pressure (systolic)", validators=[
        Optional(), NumberRange(min=0, message="Blood pressure cannot be negative.")])
    bp_diastolic = IntegerField("Blood pressure (diastolic)", validators=[
        Optional(), NumberRange(min=0, message="Blood pressure cannot be negative.")])
    notes = TextAreaField("Notes", validators=[Optional(), Length(max=2000)])
    submit = SubmitField("Save")

    def to_fields(self):
        return {
            "date": self.date.data,
            "weight_kg": self.weight_kg.data,
            "steps": self.steps.data,
            "bp_systolic": self.bp_systolic.data,
            "bp_diastolic": self.bp_diastolic.data,
            "notes": (self.notes.data or "").strip() or None,
        }


class SearchForm(FlaskForm):
    """Se envía por GET: sin token CSRF."""
    class Meta:
        csrf = False

    q = StringField("Text", validators=[Optional(), Length(max=100)])
    date_from = DateField("From", validators=[Optional()])
    date_to = DateField("To", validators=[Optional()])
    min_duration = IntegerField("Minimum duration", validators=[
        Optional(), NumberRange(min=0, message="Minimum duration cannot be negative.")])
