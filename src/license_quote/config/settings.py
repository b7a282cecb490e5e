"""
Centralized settings and path configuration for the quote calculator.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


def get_package_root() -> Path:
    """Get the license_quote package directory."""
    return Path(__file__).resolve().parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""
    
    # Catalog definition files (items.csv, sub_options.csv, combo_rules.csv)
    catalog_dir: Path
    
    # Pricing
    tax_rate: float = 0.19  # IVA
    currency_symbol: str = "$"  # COP, whole pesos
    
    # Sub-option bounds shared by the whole catalog
    sub_option_max_quantity: int = 130
    default_sub_option_min: int = 20
    
    log_level: str = "INFO"
    
    @property
    def items_csv(self) -> Path:
        return self.catalog_dir / 'items.csv'
    
    @property
    def sub_options_csv(self) -> Path:
        return self.catalog_dir / 'sub_options.csv'
    
    @property
    def combo_rules_csv(self) -> Path:
        return self.catalog_dir / 'combo_rules.csv'
    
    @classmethod
    def load(cls, catalog_dir: Optional[Path] = None) -> 'Settings':
        """Load settings, honouring LICENSE_QUOTE_* environment overrides."""
        env_dir = os.environ.get('LICENSE_QUOTE_CATALOG_DIR')
        if catalog_dir is None:
            catalog_dir = Path(env_dir) if env_dir else get_package_root() / 'data' / 'catalog'
        
        return cls(
            catalog_dir=Path(catalog_dir),
            log_level=os.environ.get('LICENSE_QUOTE_LOG_LEVEL', 'INFO').upper(),
            currency_symbol=os.environ.get('LICENSE_QUOTE_CURRENCY_SYMBOL', '$'),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
