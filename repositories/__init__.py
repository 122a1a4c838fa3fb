"""Supabase-backed persistence for sales and catalog reads."""
