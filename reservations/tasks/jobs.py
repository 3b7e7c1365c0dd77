from reservations.tasks.celery_app import celery
from reservations.tasks import worker_jobs

@celery.task(name="reservations.tasks.jobs.complete_past_bookings")
def complete_past_bookings():
    return worker_jobs.complete_past_bookings()
