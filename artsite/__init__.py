"""ChaoticColors artist site: editable gallery, shop and about sections."""
