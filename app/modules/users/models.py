# Supabase table: users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

users:
- id: text (primary key) - the Supabase Auth user id (auth.users.id)
- email: text (unique, not null)
- name: text (nullable)
- role: text (not null, default 'CANDIDATE') - CANDIDATE | RECRUITER
- created_at: timestamp (default: now())

Rows are created by POST /api/auth/sync-user after a successful sign-up.
Nothing in this service updates or deletes them.

create table users (
    id text primary key,
    email text not null unique,
    name text,
    role text not null default 'CANDIDATE' check (role in ('CANDIDATE', 'RECRUITER')),
    created_at timestamptz not null default now()
);
"""
