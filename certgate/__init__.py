"""certgate - oracle-gated calibration certificate issuance."""
