"""
Services module - Audio, storage, transcription and episode workflows.
"""
