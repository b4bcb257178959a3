from app.models.clinic import Clinic
from app.models.doctor import Doctor
from app.models.shift_time import ShiftTime
from app.models.queue_counter import QueueCounter
from app.models.appointment import Appointment
from app.models.payment import Payment
