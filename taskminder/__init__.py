"""taskminder - recurring task reminders."""
