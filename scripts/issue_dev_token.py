import argparse
import os
import time

import jwt


def main() -> None:
    parser = argparse.ArgumentParser(description="Issue a dev JWT for the installations API.")
    parser.add_argument("--role", choices=["admin", "installer", "viewer"], default="admin")
    parser.add_argument("--tenant", required=True, help="Tenant the token is scoped to.")
    parser.add_argument("--ttl", type=int, default=3600, help="Lifetime in seconds.")
    args = parser.parse_args()
    secret = os.environ.get("INSTALLATIONS_JWT_SECRET", "").strip()
    if not secret:
        raise SystemExit("INSTALLATIONS_JWT_SECRET is required")
    issuer = os.environ.get("INSTALLATIONS_JWT_ISSUER", "solarbiz-installations")
    audience = os.environ.get("INSTALLATIONS_JWT_AUDIENCE", "installations")
    now = int(time.time())
    payload = {
        "iss": issuer,
        "aud": audience,
        "iat": now,
        "exp": now + args.ttl,
        "sub": f"dev-{args.role}",
        "email": f"{args.role}@example.com",
        "roles": [args.role],
        "tenant_id": args.tenant,
    }
    token = jwt.encode(payload, secret, algorithm="HS256")
    print(token)


if __name__ == "__main__":
    main()
