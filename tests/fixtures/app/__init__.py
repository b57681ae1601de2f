"""Sample host application resolved by naming convention in tests."""
