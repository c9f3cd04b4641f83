"""
Configuration module for the clinic voice agent.

Key components:
- constants: protocol names, close codes and default model settings.
- logging_config: console and rotating-file logging for the application logger.
- settings: environment-based runtime settings and startup validation.

Usage examples:
```python
from clinic_agent.config.logging_config import configure_logging
from clinic_agent.config.settings import Settings, load_env_file

load_env_file()
logger = configure_logging()
settings = Settings.from_env().require()
```
"""
