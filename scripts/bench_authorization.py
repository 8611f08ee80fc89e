#!/usr/bin/env python3
"""Benchmark permission checks: latency (p50, p95, p99) and QPS.

Usage:
  export API_URL=http://localhost:8000 KEYCLOAK_URL=http://localhost:8080
  export BENCH_USER=operator1 BENCH_PASSWORD=...
  uv run python scripts/bench_authorization.py [--num-checks 500] [--batch-size 0]

With --batch-size N > 0 every request carries N checks in one ``checks`` list.
"""
from __future__ import annotations

import argparse
import os
import statistics
import sys
import time
from pathlib import Path

import httpx

CHECKS = [
    {"resource": "locations", "action": "read", "resource_data": {"operator_id": "bench-operator"}},
    {"resource": "bookings", "action": "update"},
    {"resource": "reports", "action": "read"},
    {"resource": "api_management", "action": "delete"},
]


def get_token(
    keycloak_url: str,
    realm: str,
    client_id: str,
    client_secret: str,
    username: str,
    password: str,
) -> str:
    url = f"{keycloak_url.rstrip('/')}/realms/{realm}/protocol/openid-connect/token"
    r = httpx.post(
        url,
        data={
            "grant_type": "password",
            "client_id": client_id,
            "client_secret": client_secret,
            "username": username,
            "password": password,
        },
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        timeout=30.0,
    )
    r.raise_for_status()
    return r.json()["access_token"]


def _payload(i: int, batch_size: int) -> dict:
    if batch_size > 0:
        return {"checks": [CHECKS[(i + j) % len(CHECKS)] for j in range(batch_size)]}
    return CHECKS[i % len(CHECKS)]


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark authorization checks")
    parser.add_argument("--num-checks", type=int, default=200, help="Number of check requests")
    parser.add_argument("--batch-size", type=int, default=0, help="Checks per request (0 = single)")
    parser.add_argument(
        "--output", type=str, default="/results/bench_authorization.txt", help="Output file path"
    )
    args = parser.parse_args()

    api_url = os.environ.get("API_URL", "http://localhost:8000").rstrip("/")
    keycloak_url = os.environ.get("KEYCLOAK_URL", "http://localhost:8080")
    realm = os.environ.get("KEYCLOAK_REALM", "parkaccess")
    client_id = os.environ.get("KEYCLOAK_CLIENT_ID", "parkaccess-api")
    client_secret = os.environ.get("KEYCLOAK_CLIENT_SECRET", "parkaccess-api-secret")
    user = os.environ.get("BENCH_USER", "testuser")
    password = os.environ.get("BENCH_PASSWORD", "testpass")

    print("Getting token...")
    token = get_token(keycloak_url, realm, client_id, client_secret, user, password)
    headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}

    latencies: list[float] = []
    errors = 0
    allowed = 0
    print(f"Running {args.num_checks} check requests...")
    start_total = time.perf_counter()
    with httpx.Client(timeout=30.0) as client:
        for i in range(args.num_checks):
            t0 = time.perf_counter()
            r = client.post(
                f"{api_url}/v1/authorization/check",
                json=_payload(i, args.batch_size),
                headers=headers,
            )
            elapsed = time.perf_counter() - t0
            if r.status_code == 200:
                latencies.append(elapsed)
                body = r.json()
                results = body["results"].values() if "results" in body else [body["allowed"]]
                allowed += sum(1 for v in results if v)
            else:
                errors += 1
    total_elapsed = time.perf_counter() - start_total

    n = len(latencies)
    if n == 0:
        print("No successful checks.")
        return 1

    qps = n / total_elapsed
    cuts = statistics.quantiles(latencies, n=100, method="inclusive") if n > 1 else latencies * 99
    p50, p95, p99 = (cuts[i] * 1000 for i in (49, 94, 98))

    summary = (
        f"Authorization benchmark (requests={n}, batch={args.batch_size}, errors={errors}, "
        f"allowed={allowed})\n"
        f"  QPS: {qps:.2f}\n"
        f"  Latency: p50={p50:.1f} ms, p95={p95:.1f} ms, p99={p99:.1f} ms\n"
        f"  Total time: {total_elapsed:.2f} s\n"
    )
    print(summary)

    output = Path(args.output)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(summary, encoding="utf-8")
    except OSError as e:
        print(f"Could not write {output}: {e}")
    else:
        print(f"Wrote {output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
