"""Operations behind the gohack commands."""
