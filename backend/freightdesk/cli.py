"""Management CLI.

Usage:
    python -m freightdesk.cli create-tables
    python -m freightdesk.cli create-superadmin <email> <password> <full name>
    python -m freightdesk.cli create-rm <login code> <password> <full name>
"""

import asyncio
import sys

from sqlalchemy import select

from freightdesk.auth.password import check_password_length, hash_password
from freightdesk.database import async_session, create_all_tables
from freightdesk.models.relationship_manager import RelationshipManager
from freightdesk.models.user import UserAccount, UserProfile, UserRole


async def create_superadmin(email: str, password: str, full_name: str) -> None:
    email = email.strip().lower()
    async with async_session() as db:
        existing = await db.execute(select(UserAccount).where(UserAccount.email == email))
        if existing.scalar_one_or_none():
            print(f"  {email} already exists.")
            return
        account = UserAccount(email=email, hashed_password=hash_password(password))
        db.add(account)
        await db.flush()
        db.add(UserProfile(
            id=account.id,
            email=email,
            full_name=full_name,
            role=UserRole.SUPERADMIN,
            permissions={},
        ))
        await db.commit()
    print(f"  Created superadmin {email}")


async def create_rm(login_code: str, password: str, full_name: str) -> None:
    login_code = login_code.strip().lower()
    async with async_session() as db:
        existing = await db.execute(
            select(RelationshipManager).where(RelationshipManager.login_code == login_code)
        )
        if existing.scalar_one_or_none():
            print(f"  {login_code} already exists.")
            return
        db.add(RelationshipManager(
            login_code=login_code,
            hashed_password=hash_password(password),
            full_name=full_name,
        ))
        await db.commit()
    print(f"  Created relationship manager {login_code}")


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    cmd = argv[0] if argv else ""
    if cmd in ("create-superadmin", "create-rm") and len(argv) >= 3:
        try:
            check_password_length(argv[2])
        except ValueError as e:
            print(f"  {e}")
            return 1
    if cmd == "create-tables":
        asyncio.run(create_all_tables())
        print("  Tables created.")
    elif cmd == "create-superadmin" and len(argv) >= 4:
        asyncio.run(create_superadmin(argv[1], argv[2], " ".join(argv[3:])))
    elif cmd == "create-rm" and len(argv) >= 4:
        asyncio.run(create_rm(argv[1], argv[2], " ".join(argv[3:])))
    else:
        print(__doc__)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
