"""Billing services: sale submission, sale form sessions, pricing tiers, dashboard."""
