# Supabase tables: profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in repository.py
# Passwords and sessions live in auth.users, managed by Supabase Auth

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- email: text (unique, not null)
- fin: char(12) (unique, nullable) - Fayda national ID number
- phone_number: text (nullable) - as returned by Fayda, e.g. +2519XXXXXXXX
- full_name: text (nullable)
- dob: text (nullable)
- gender: text (nullable)
- photo_url: text (nullable)
- role: text (not null, default 'citizen') - citizen | admin | super_admin
- email_verified: boolean (not null, default false)
- failed_login_attempts: integer (not null, default 0)
- locked_until: timestamptz (nullable)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (nullable)

Indexes: unique(fin), unique(email), index(phone_number)
"""
