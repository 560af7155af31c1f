"""Policy sources: the Supabase REST view and local JSON exports."""
