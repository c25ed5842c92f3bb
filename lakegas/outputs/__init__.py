"""Result tables and file export."""
