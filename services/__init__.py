"""Yannova API services.

Quote calculation, chatbot, project planning, Supabase persistence and the
Gemini-backed AI tools.
"""
