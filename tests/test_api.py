"""
End-to-end tests over HTTP: clinic and doctor setup, shift management,
public booking and the clinic panel, plus error status mapping.
"""

import pytest

from app.models.shift_time import ShiftStatus

SHIFT_DATE = "2024-06-01"


@pytest.fixture
def booking(doctor, shift, patient):
    return {
        "doctor_id": doctor.id,
        "shift_time_id": shift.id,
        "appointment_date": SHIFT_DATE,
        "appointment_time": "9.00am - 10.00am",
        **patient,
    }


class TestClinicAndDoctors:
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_create_clinic_and_doctor(self, client):
        resp = await client.post("/clinics/", json={"name": "North Clinic", "city": "Kandy"})
        assert resp.status_code == 201
        clinic_id = resp.json()["id"]

        resp = await client.post(f"/clinics/{clinic_id}/doctors/", json={
            "name": "Dr. Jayasuriya",
            "gender": "Male",
            "phone_number": "0770000000",
            "city": "Kandy",
        })
        assert resp.status_code == 201
        body = resp.json()
        assert body["clinic_id"] == clinic_id
        assert body["shift_time_ids"] == []

        listed = await client.get(f"/clinics/{clinic_id}/doctors/")
        assert [d["name"] for d in listed.json()] == ["Dr. Jayasuriya"]

    async def test_unknown_clinic(self, client):
        resp = await client.get("/clinics/missing")
        assert resp.status_code == 404
        assert resp.json()["error"] == "NotFoundError"

    async def test_doctor_is_clinic_scoped(self, client, doctor, other_clinic):
        resp = await client.get(f"/clinics/{other_clinic.id}/doctors/{doctor.id}")
        assert resp.status_code == 404


    async def test_update_doctor_with_shifts(self, client, doctor):
        base = f"/clinics/{doctor.clinic_id}/doctors/{doctor.id}"
        resp = await client.patch(base, json={
            "specialization": "Cardiology",
            "shift_times": [
                {"date": SHIFT_DATE, "time_range": "9.00am - 10.00am"},
                {"date": SHIFT_DATE, "time_range": "4.00pm - 5.00pm"},
            ],
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["specialization"] == "Cardiology"
        assert body["name"] == doctor.name
        assert len(body["shift_time_ids"]) == 2

        shifts = (await client.get(f"{base}/shifts")).json()
        assert sorted(s["id"] for s in shifts) == sorted(body["shift_time_ids"])

    async def test_update_doctor_bad_shift_changes_nothing(self, client, doctor):
        base = f"/clinics/{doctor.clinic_id}/doctors/{doctor.id}"
        resp = await client.patch(base, json={
            "name": "Renamed",
            "shift_times": [{"date": SHIFT_DATE, "time_range": "whenever"}],
        })
        assert resp.status_code == 400
        assert resp.json()["index"] == 0
        assert (await client.get(base)).json()["name"] == doctor.name

    async def test_delete_doctor_is_soft(self, client, doctor, shift):
        base = f"/clinics/{doctor.clinic_id}/doctors/{doctor.id}"
        resp = await client.delete(base)
        assert resp.status_code == 204

        assert (await client.get(base)).status_code == 404
        assert (await client.get(f"/clinics/{doctor.clinic_id}/doctors/")).json() == []
        public = await client.get(f"/appointments/shift-times/{doctor.id}/{SHIFT_DATE}")
        assert public.status_code == 404
        assert (await client.delete(base)).status_code == 404


class TestShiftRoutes:
    async def test_shift_lifecycle(self, client, doctor):
        base = f"/clinics/{doctor.clinic_id}/doctors/{doctor.id}/shifts"

        resp = await client.put(base, json={"shifts": [
            {"date": SHIFT_DATE, "time_range": "9.00AM-10.00AM"},
            {"date": SHIFT_DATE, "time_range": "4.00pm - 5.00pm", "shift_name": "Evening"},
        ]})
        assert resp.status_code == 200
        body = resp.json()
        assert body["operation"] == "upsert"
        morning, evening = body["shift_ids"]
        assert body["doctor_shift_ids"] == [morning, evening]

        shifts = (await client.get(base)).json()
        assert {s["time_range"] for s in shifts} == {"9.00am - 10.00am", "4.00pm - 5.00pm"}

        resp = await client.post(base, json={"shifts": [{"date": SHIFT_DATE, "time_range": "9.00am - 10.00am"}]})
        assert resp.status_code == 409
        assert resp.json()["error"] == "DuplicateShiftError"
        assert resp.json()["index"] == 0

        resp = await client.patch(base, json={"updates": [{"shift_id": evening, "status": "Unavailable"}]})
        assert resp.status_code == 200

        avail = await client.get(
            f"/clinics/{doctor.clinic_id}/doctors/{doctor.id}/availability", params={"date": SHIFT_DATE}
        )
        assert avail.status_code == 200
        assert len(avail.json()["shifts"]) == 2

        public = await client.get(f"/appointments/shift-times/{doctor.id}/{SHIFT_DATE}")
        assert [s["id"] for s in public.json()] == [morning]

        resp = await client.post(f"{base}/remove", json={"shift_ids": [morning]})
        assert resp.json()["doctor_shift_ids"] == [evening]

        resp = await client.post(f"{base}/replace", json={"shifts": [
            {"date": SHIFT_DATE, "time_range": "1.00pm - 2.00pm"},
        ]})
        assert resp.status_code == 200
        assert resp.json()["doctor_shift_ids"] == resp.json()["shift_ids"]

    async def test_invalid_batch_reports_index(self, client, doctor):
        resp = await client.put(
            f"/clinics/{doctor.clinic_id}/doctors/{doctor.id}/shifts",
            json={"shifts": [
                {"date": SHIFT_DATE, "time_range": "9.00am - 10.00am"},
                {"date": SHIFT_DATE, "time_range": "bad-format"},
            ]},
        )
        assert resp.status_code == 400
        assert resp.json()["index"] == 1

        shifts = await client.get(f"/clinics/{doctor.clinic_id}/doctors/{doctor.id}/shifts")
        assert shifts.json() == []

    async def test_null_fields_report_index(self, client, doctor):
        resp = await client.post(
            f"/clinics/{doctor.clinic_id}/doctors/{doctor.id}/shifts",
            json={"shifts": [
                {"date": SHIFT_DATE, "time_range": "9.00am - 10.00am"},
                {"date": None, "time_range": "9.00am - 10.00am"},
            ]},
        )
        assert resp.status_code == 400
        assert resp.json()["index"] == 1


class TestBookingRoutes:
    async def test_public_booking_flow(self, client, doctor, booking):
        first = await client.post("/appointments/", json=booking)
        second = await client.post("/appointments/", json=booking)
        assert first.status_code == 201
        assert [first.json()["queue_number"], second.json()["queue_number"]] == [1, 2]
        assert first.json()["status"] == "Confirm"

        ref = first.json()["reference_number"]
        found = await client.get(f"/appointments/reference/{ref}")
        assert found.json()["id"] == first.json()["appointment_id"]

        counter = await client.get("/appointments/counter", params={
            "doctor_id": doctor.id, "shift_time_id": booking["shift_time_id"], "date": SHIFT_DATE,
        })
        assert counter.json()["current_queue"] == 2

    async def test_unavailable_shift_is_conflict(self, client, doctor, make_shift, booking):
        closed = await make_shift(doctor, time_range="1.00pm - 2.00pm", status=ShiftStatus.Unavailable)
        resp = await client.post("/appointments/", json={**booking, "shift_time_id": closed.id})
        assert resp.status_code == 409
        assert resp.json()["error"] == "SlotUnavailableError"

    async def test_missing_fields(self, client, booking):
        resp = await client.post("/appointments/", json={**booking, "patient_name": ""})
        assert resp.status_code == 400
        assert resp.json()["missing"] == ["patient_name"]

    async def test_clinic_booking_checks_clinic(self, client, other_clinic, booking):
        resp = await client.post(f"/clinics/{other_clinic.id}/appointments/", json=booking)
        assert resp.status_code == 404

    async def test_clinic_panel(self, client, doctor, booking):
        base = f"/clinics/{doctor.clinic_id}/appointments"
        appt_id = (await client.post(f"{base}/", json=booking)).json()["appointment_id"]

        listed = await client.get(f"{base}/", params={"doctor_id": doctor.id, "date": SHIFT_DATE})
        assert [a["id"] for a in listed.json()] == [appt_id]

        read = await client.patch(f"{base}/{appt_id}/read")
        assert read.json()["is_read"] is True

        resp = await client.patch(f"{base}/{appt_id}/status", json={"status": "Completed"})
        assert resp.status_code == 409

        paid = await client.post(f"{base}/{appt_id}/payment", json={"consultation_fee": 2000, "payment_method": "Cash"})
        assert paid.status_code == 201
        assert paid.json()["total_amount"] == 2000

        appt = await client.get(f"{base}/{appt_id}")
        assert appt.json()["status"] == "Completed"

        payment = await client.get(f"{base}/{appt_id}/payment")
        assert payment.json()["reference_number"] == paid.json()["reference_number"]

        resp = await client.patch(f"{base}/{appt_id}/status", json={"status": "Cancelled"})
        assert resp.status_code == 409
        assert resp.json()["error"] == "InvalidTransitionError"
