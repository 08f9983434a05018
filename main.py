# Cloud functions for the RICGCW backend.
#
# This file containing Python cloud functions must be named main.py.
# `api` serves the whole REST API; `birthday_reminders` runs once a day.

from firebase_functions import https_fn, options, scheduler_fn
from flask import Request, Response

from ricgcw import create_app
from ricgcw.reminders import run_birthday_reminders

app = create_app()


def dispatch(req: Request) -> Response:
    """Hand an incoming functions request to the Flask app."""
    with app.request_context(req.environ):
        return app.full_dispatch_request()


@https_fn.on_request(memory=options.MemoryOption.MB_256)
def api(req: https_fn.Request) -> https_fn.Response:
    return dispatch(req)


@scheduler_fn.on_schedule(
    schedule="every day 00:00",
    timezone=scheduler_fn.Timezone(app.config["BIRTHDAY_SCHEDULE_TIMEZONE"]),
)
def birthday_reminders(event: scheduler_fn.ScheduledEvent) -> None:
    run_birthday_reminders(app)
