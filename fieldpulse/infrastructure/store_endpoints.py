"""
Observation store endpoint constants and configuration.

This module contains all store endpoint paths and related constants.
Centralizing these values makes it easy to swap out endpoints or update API versions.
"""


class StoreEndpoints:
    """Observation store endpoint paths."""
    
    # Base paths
    PARCELS_BASE = "/parcels"
    
    # Parcel data endpoints
    OBSERVATIONS = f"{PARCELS_BASE}/{{parcel_id}}/observations/"
    ASSESSMENTS = f"{PARCELS_BASE}/{{parcel_id}}/assessments/"
    
    @classmethod
    def observations(cls, parcel_id: str) -> str:
        """
        Get the observations endpoint for a parcel.
        
        Args:
            parcel_id: Parcel identifier
            
        Returns:
            Formatted endpoint path
        """
        return cls.OBSERVATIONS.format(parcel_id=parcel_id)
    
    @classmethod
    def assessments(cls, parcel_id: str) -> str:
        """
        Get the assessments endpoint for a parcel.
        
        Args:
            parcel_id: Parcel identifier
            
        Returns:
            Formatted endpoint path
        """
        return cls.ASSESSMENTS.format(parcel_id=parcel_id)


class StoreConstants:
    """General store client constants."""
    
    # HTTP Headers
    CONTENT_TYPE_JSON = "application/json"
    
    # Timeouts (in seconds)
    DEFAULT_TIMEOUT = 30.0
    
    # Pagination
    DEFAULT_PAGE_SIZE = 100
    MAX_PAGE_SIZE = 1000
