# /healthapp/main/routes.py
# Rutas principales: inicio, tablero, búsqueda y clima.

from flask import render_template, request, current_app
from flask_login import current_user

from . import main
from ..errors import translate
from ..filters import WorkoutFilter
from ..forms import SearchForm
from ..services import weekly_summary, search_workouts
from ..weather_adapter import WeatherError, fetch_weather, friendly_message
from security.utils import login_required


@main.route("/")
def index():
    stats = None
    if current_user.is_authenticated:
        summary = weekly_summary(current_user.id)
        if not summary.ok:
            return translate(summary.error)
        stats = summary.value
    return render_template("home.html", title="Home", stats=stats)


@main.route("/about")
def about():
    return render_template("about.html", title="About")


@main.route("/dashboard")
@login_required
def dashboard(auth):
    summary = weekly_summary(auth.id)
    if not summary.ok:
        return translate(summary.error)
    return render_template("dashboard.html", title="Dashboard", week=summary.value)


@main.route("/search")
@login_required
def search(auth):
    return render_template("search.html", title="Search Workouts", form=SearchForm(formdata=None))


@main.route("/search/results")
@login_required
def search_results(auth):
    form = SearchForm(formdata=request.args)
    if not form.validate():
        return render_template("search.html", title="Search Workouts", form=form), 422

    workout_filter = WorkoutFilter.from_form(form)
    found = search_workouts(auth.id, workout_filter)
    if not found.ok:
        return translate(found.error)
    return render_template("search_results.html", title="Search Results", form=form,
                           workouts=found.value, count=len(found.value))


@main.route("/weather")
def weather():
    city = (request.args.get("city") or "").strip()
    report, error = None, None
    if city:
        try:
            report = fetch_weather(city,
                                   api_key=current_app.config.get("OPENWEATHER_API_KEY"),
                                   base_url=current_app.config["WEATHER_BASE_API"],
                                   timeout=current_app.config["WEATHER_TIMEOUT"])
        except WeatherError as e:
            current_app.logger.warning("Weather error (%s) for %r: %s", e.kind, city, e)
            error = friendly_message(e, city)
    return render_template("weather.html", title="Weather", city=city, weather=report, error=error)
