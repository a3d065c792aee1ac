"""Supabase persistence for the settlement pipeline."""
