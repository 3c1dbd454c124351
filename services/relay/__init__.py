"""TTS relay service: forwards synthesis calls to ElevenLabs, Google and Polly."""
