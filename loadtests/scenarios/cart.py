"""Cart load test scenarios.

Stateful SequentialTaskSet journeys covering a frame-plus-prescription-lens
purchase, switching a lens between inline and saved prescriptions, and a
browsing customer who empties their cart.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    frame_line,
    inline_prescription,
    plain_lens_line,
    prescription_lens_line,
    profile_data,
    profile_name,
    service_line,
    user_id,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CartState, ProfileState


class FrameWithLensJourney(SequentialTaskSet):
    """Add Frame -> Add Prescription Lens -> Read Totals -> Bump Quantity -> Read Totals."""

    def on_start(self):
        self.state = CartState(user_id=user_id())

    @task
    def add_frame(self):
        with self.client.post(
            f"/carts/{self.state.user_id}/lines",
            json=frame_line(),
            catch_response=True,
            name="POST /carts/{user}/lines [frame]",
        ) as resp:
            if resp.status_code == 201:
                self.state.frame_line_id = resp.json()["line_id"]
            else:
                resp.failure(f"Add frame failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_lens(self):
        with self.client.post(
            f"/carts/{self.state.user_id}/lines",
            json=prescription_lens_line(),
            catch_response=True,
            name="POST /carts/{user}/lines [rx lens]",
        ) as resp:
            if resp.status_code == 201:
                self.state.lens_line_id = resp.json()["line_id"]
            else:
                resp.failure(f"Add lens failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def read_totals(self):
        with self.client.get(
            f"/carts/{self.state.user_id}", catch_response=True, name="GET /carts/{user}"
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Read cart failed: {resp.status_code}: {extract_error_detail(resp)}")
            elif resp.json()["prescription_fees_total"] in ("0", 0):
                resp.failure("Prescription lens was not surcharged")

    @task
    def bump_frame_quantity(self):
        with self.client.put(
            f"/carts/{self.state.user_id}/lines/{self.state.frame_line_id}",
            json={"quantity": 2},
            catch_response=True,
            name="PUT /carts/{user}/lines/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Update quantity failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def read_totals_again(self):
        self.client.get(f"/carts/{self.state.user_id}", name="GET /carts/{user}")

    @task
    def done(self):
        self.interrupt()


class PrescriptionSwitchJourney(SequentialTaskSet):
    """Add Lens Inline -> Save As Profile -> Switch To New Profile -> Drop Prescription."""

    def on_start(self):
        self.state = CartState(user_id=user_id())
        self.profiles = ProfileState()

    @task
    def add_lens(self):
        with self.client.post(
            f"/carts/{self.state.user_id}/lines",
            json=prescription_lens_line(),
            catch_response=True,
            name="POST /carts/{user}/lines [rx lens]",
        ) as resp:
            if resp.status_code == 201:
                self.state.lens_line_id = resp.json()["line_id"]
            else:
                resp.failure(f"Add lens failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def save_as_profile(self):
        with self.client.post(
            f"/carts/{self.state.user_id}/lines/{self.state.lens_line_id}/prescription/save",
            json={"profile_name": profile_name()},
            catch_response=True,
            name="POST /carts/{user}/lines/{id}/prescription/save",
        ) as resp:
            if resp.status_code == 201:
                self.profiles.profile_ids.append(resp.json()["profile_id"])
            else:
                resp.failure(f"Save as profile failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def create_second_profile(self):
        with self.client.post(
            f"/prescriptions/{self.state.user_id}",
            json=profile_data(),
            catch_response=True,
            name="POST /prescriptions/{user}",
        ) as resp:
            if resp.status_code == 201:
                self.profiles.profile_ids.append(resp.json()["profile_id"])
            else:
                resp.failure(f"Create profile failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def switch_profile(self):
        with self.client.put(
            f"/carts/{self.state.user_id}/lines/{self.state.lens_line_id}/prescription/profile",
            json={"profile_id": self.profiles.profile_ids[-1]},
            catch_response=True,
            name="PUT /carts/{user}/lines/{id}/prescription/profile",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Switch profile failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def back_to_inline(self):
        with self.client.put(
            f"/carts/{self.state.user_id}/lines/{self.state.lens_line_id}/prescription/inline",
            json={"payload": inline_prescription()},
            catch_response=True,
            name="PUT /carts/{user}/lines/{id}/prescription/inline",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Set inline failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def drop_prescription(self):
        with self.client.put(
            f"/carts/{self.state.user_id}/lines/{self.state.lens_line_id}/prescription/profile",
            json={},
            catch_response=True,
            name="PUT /carts/{user}/lines/{id}/prescription/profile [clear]",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Drop prescription failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class BrowseAndClearJourney(SequentialTaskSet):
    """Add Frame -> Add Plain Lens -> Add Service -> Remove Service -> Clear."""

    def on_start(self):
        self.state = CartState(user_id=user_id())

    def _add(self, payload, label):
        with self.client.post(
            f"/carts/{self.state.user_id}/lines",
            json=payload,
            catch_response=True,
            name=f"POST /carts/{{user}}/lines [{label}]",
        ) as resp:
            if resp.status_code == 201:
                self.state.line_ids.append(resp.json()["line_id"])
            else:
                resp.failure(f"Add {label} failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def add_frame(self):
        self._add(frame_line(), "frame")

    @task
    def add_plain_lens(self):
        self._add(plain_lens_line(), "lens")

    @task
    def add_service(self):
        self._add(service_line(), "service")

    @task
    def remove_last(self):
        if not self.state.line_ids:
            return
        line_id = self.state.line_ids.pop()
        with self.client.delete(
            f"/carts/{self.state.user_id}/lines/{line_id}",
            catch_response=True,
            name="DELETE /carts/{user}/lines/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Remove line failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def clear(self):
        with self.client.post(
            f"/carts/{self.state.user_id}/clear", catch_response=True, name="POST /carts/{user}/clear"
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Clear failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class CartShopperUser(HttpUser):
    """Locust user simulating storefront cart traffic.

    Weighted distribution:
    - 50% Frame with prescription lens
    - 25% Prescription switching
    - 25% Browse and clear
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        FrameWithLensJourney: 2,
        PrescriptionSwitchJourney: 1,
        BrowseAndClearJourney: 1,
    }
