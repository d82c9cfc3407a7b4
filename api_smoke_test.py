#!/usr/bin/env python3
"""
Smoke test for a running hospital API.

Logs in as each seeded account (``manage.py seed_hospital``), calls the main
endpoints and reports failures.  Exits non-zero if any call misbehaved.

    python api_smoke_test.py [--base-url http://127.0.0.1:8000]
"""
import argparse
import sys
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

TEST_USERS = {
    "admin": {"username": "admin", "password": "admin123"},
    "doctor": {"username": "dr.smith", "password": "doctor123"},
    "nurse": {"username": "nurse.jones", "password": "nurse123"},
}


@dataclass
class CallResult:
    success: bool
    endpoint: str
    method: str
    status_code: int
    response_time: float
    error_message: str = ""
    user_role: str = ""


class APISmokeTester:
    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.headers: Dict[str, str] = {}
        self.current_role: Optional[str] = None
        self.results: List[CallResult] = []

    @property
    def errors(self) -> List[CallResult]:
        return [r for r in self.results if not r.success]

    def call(self, method: str, endpoint: str, data: Optional[Dict[str, Any]] = None,
             expected_status: int = 200) -> Optional[requests.Response]:
        start = time.time()
        try:
            response = self.session.request(method, f"{self.base_url}{endpoint}", json=data, headers=self.headers, timeout=10)
        except requests.RequestException as e:
            self.results.append(CallResult(False, endpoint, method, 0, time.time() - start, str(e), self.current_role or ""))
            print(f"FAIL {method} {endpoint}: {e}")
            return None
        elapsed = time.time() - start
        ok = response.status_code == expected_status
        self.results.append(CallResult(ok, endpoint, method, response.status_code, elapsed,
                                       "" if ok else response.text[:200], self.current_role or ""))
        print(f"{'ok  ' if ok else 'FAIL'} {method} {endpoint} -> {response.status_code} ({elapsed:.2f}s)")
        return response

    def login(self, role: str) -> bool:
        self.headers = {}
        self.current_role = role
        response = self.call("POST", "/api/auth/login", TEST_USERS[role])
        if response is None or response.status_code != 200:
            return False
        self.headers = {"Authorization": f"Token {response.json()['token']}"}
        return True

    def run_for_role(self, role: str) -> None:
        print(f"\n== {role} ==")
        if not self.login(role):
            return
        for endpoint in ("/api/patients", "/api/patients/critical", "/api/notifications",
                         "/api/notifications/unread", "/api/vital-signs/critical",
                         "/api/medical-records", "/api/appointments", "/api/dashboard",
                         "/api/users/doctors", "/api/users/me"):
            self.call("GET", endpoint)
        self.call("POST", "/api/vital-signs/classify", {"temperature": 38.2, "heartRate": 88})
        self.call("GET", "/api/users", expected_status=200 if role == "admin" else 403)
        if role in ("doctor", "nurse"):
            patients = self.call("GET", "/api/patients")
            if patients is not None and patients.ok and patients.json():
                pid = patients.json()[0]["id"]
                self.call("POST", "/api/vital-signs", {"patientId": pid, "heartRate": 82, "temperature": 37.0}, 201)
                self.call("GET", f"/api/vital-signs/latest/{pid}")

    def run(self) -> bool:
        self.call("GET", "/healthz")
        for role in TEST_USERS:
            self.run_for_role(role)
        total = len(self.results)
        print(f"\n{total - len(self.errors)}/{total} calls succeeded")
        for r in self.errors:
            print(f"  [{r.user_role}] {r.method} {r.endpoint} -> {r.status_code}: {r.error_message}")
        return not self.errors


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--base-url", default="http://127.0.0.1:8000")
    args = parser.parse_args()
    sys.exit(0 if APISmokeTester(args.base_url).run() else 1)


if __name__ == "__main__":
    main()
