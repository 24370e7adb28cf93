#!/usr/bin/env python3
"""
CLI tool to manage platform users.

Usage:
    python -m user_service.cli.manage_users create --name "Jane Doe" --email jane@example.com --role ADMIN
    python -m user_service.cli.manage_users list [--page 0] [--size 20]
    python -m user_service.cli.manage_users show --id <uuid> | --email <email> | --phone <phone>
    python -m user_service.cli.manage_users set-status --id <uuid> --status SUSPENDED
    python -m user_service.cli.manage_users delete --id <uuid>

Examples:
    # Create an organizer
    python -m user_service.cli.manage_users create --name "Jane Doe" --email jane@example.com --role ORGANIZER

    # Look a user up by phone number
    python -m user_service.cli.manage_users show --phone "+1-555-123-4567"

    # Suspend a user
    python -m user_service.cli.manage_users set-status --id 550e8400-e29b-41d4-a716-446655440000 --status SUSPENDED

    # Delete without the confirmation prompt
    python -m user_service.cli.manage_users delete --id 550e8400-e29b-41d4-a716-446655440000 --yes
"""
import asyncio
import argparse
import sys

from user_service.application.user_application_service import UserApplicationService
from user_service.config import settings
from user_service.db import init_db, close_db
from user_service.domain.entities import User
from user_service.domain.exceptions import UserDomainError
from user_service.domain.value_objects import PageRequest, UserId, UserRole, UserStatus
from user_service.infrastructure.cache_service import user_cache


def print_user(user: User):
    print(f"  - {user.name} <{user.email}>")
    print(f"    ID: {user.id}")
    print(f"    Role: {user.role.value}")
    print(f"    Status: {user.status.value}")
    if user.address is not None:
        print(f"    Address: {user.address.formatted_address}")
        print(f"    Phone: {user.address.phone_number}")
    print()


async def run(command) -> int:
    """Run a command coroutine against the configured database, returning an exit code"""
    await init_db()
    try:
        await command(UserApplicationService(cache=user_cache))
        return 0
    except UserDomainError as e:
        print(f"[ERROR] {e.message}")
        return 1
    finally:
        await close_db()


async def create_user(service: UserApplicationService, name: str, email: str, role: str):
    """Create a new active user"""
    user = await service.create_user(User.create(name, email, UserRole(role)))

    print("[SUCCESS] User created successfully!")
    print()
    print_user(user)


async def list_users(service: UserApplicationService, page: int, size: int):
    """List one page of users"""
    result = await service.get_all_users(
        PageRequest(page=page, size=size, max_size=settings.max_page_size)
    )

    if not result.content:
        print("No users found.")
        return

    print("\n" + "="*70)
    print(f"Users (page {result.number + 1} of {result.total_pages}):")
    print("="*70)
    print()

    for user in result.content:
        print_user(user)

    print(f"Total users: {result.total_elements}")
    print("="*70)


async def show_user(service: UserApplicationService, user_id: str = None, email: str = None, phone: str = None):
    """Show a single user looked up by ID, email or phone number"""
    if user_id:
        user = await service.get_user_by_id(UserId.from_string(user_id))
    elif email:
        user = await service.get_user_by_email(email)
    else:
        user = await service.get_user_by_phone_number(phone)

    print_user(user)


async def set_status(service: UserApplicationService, user_id: str, status: str):
    """Activate, deactivate or suspend a user"""
    user = await service.change_status(UserId.from_string(user_id), UserStatus(status))
    print(f"[SUCCESS] User '{user.email}' is now {user.status.value}")


async def delete_user(service: UserApplicationService, user_id: str):
    """Permanently delete a user and its address"""
    await service.delete_user(UserId.from_string(user_id))
    print(f"[SUCCESS] User {user_id} deleted")


def main():
    parser = argparse.ArgumentParser(
        description='Manage platform users',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    roles = [role.value for role in UserRole]
    statuses = [status.value for status in UserStatus]

    # Create user command
    create_parser = subparsers.add_parser('create', help='Create a new user')
    create_parser.add_argument('--name', required=True, help="User's full name")
    create_parser.add_argument('--email', required=True, help='Email address (must be unique)')
    create_parser.add_argument('--role', required=True, choices=roles, help='Role on the platform')

    # List users command
    list_parser = subparsers.add_parser('list', help='List users')
    list_parser.add_argument('--page', type=int, default=0, help='Zero-based page index')
    list_parser.add_argument('--size', type=int, default=settings.default_page_size, help='Page size')

    # Show user command
    show_parser = subparsers.add_parser('show', help='Show a single user')
    lookup = show_parser.add_mutually_exclusive_group(required=True)
    lookup.add_argument('--id', dest='user_id', help='User ID')
    lookup.add_argument('--email', help='Email address')
    lookup.add_argument('--phone', help='Phone number on the address')

    # Set status command
    status_parser = subparsers.add_parser('set-status', help='Change a user status')
    status_parser.add_argument('--id', dest='user_id', required=True, help='User ID')
    status_parser.add_argument('--status', required=True, choices=statuses, help='New status')

    # Delete user command
    delete_parser = subparsers.add_parser('delete', help='Delete a user')
    delete_parser.add_argument('--id', dest='user_id', required=True, help='User ID to delete')
    delete_parser.add_argument('--yes', action='store_true', help='Skip the confirmation prompt')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Execute command
    if args.command == 'create':
        code = asyncio.run(run(lambda service: create_user(service, args.name, args.email, args.role)))
    elif args.command == 'list':
        code = asyncio.run(run(lambda service: list_users(service, args.page, args.size)))
    elif args.command == 'show':
        code = asyncio.run(run(lambda service: show_user(service, args.user_id, args.email, args.phone)))
    elif args.command == 'set-status':
        code = asyncio.run(run(lambda service: set_status(service, args.user_id, args.status)))
    elif args.command == 'delete':
        if not args.yes:
            confirm = input(f"Delete user '{args.user_id}'? (yes/no): ")
            if confirm.lower() not in ['yes', 'y']:
                print("Cancelled")
                return
        code = asyncio.run(run(lambda service: delete_user(service, args.user_id)))

    sys.exit(code)


if __name__ == '__main__':
    main()
