"""
Managed Backend Schema.

Canonical PostgreSQL definition of the ``users`` table used by the
Supabase backend, together with its indexes and the server-side functions
the repository calls through PostgREST RPC.

Logical layout
~~~~~~~~~~~~~~
=========  =============  ========  ====================================
Table      Partition key  Sort key  Secondary indexes
=========  =============  ========  ====================================
users      ``user_id``    --        ``email`` (unique among active rows),
                                    ``(location, created_at desc)``
=========  =============  ========  ====================================

Skill matching has no inverted index: ``users_offering_skills`` is a
filtered full-table scan using array overlap.

Atomicity
~~~~~~~~~
- ``create``: the partial unique index ``users_email_active_key`` is the
  conditional write; a duplicate insert fails with SQLSTATE ``23505``.
- ``rate_user``, ``add_user_skill``, ``remove_user_skill``: one
  ``UPDATE ... RETURNING`` each, so concurrent calls cannot lose updates.

Usage::

    python main.py --print-schema | psql "$DATABASE_URL"
"""

from __future__ import annotations

__all__ = ["RPC_FUNCTIONS", "SCHEMA_SQL", "render_schema"]

# Names of the server-side functions, as called by the repository.
RPC_FUNCTIONS: dict[str, str] = {
    "rate": "rate_user",
    "add_skill": "add_user_skill",
    "remove_skill": "remove_user_skill",
    "list_by_skill": "users_offering_skills",
}

_TABLE_DDL: str = """
CREATE TABLE IF NOT EXISTS {table} (
    user_id        uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    email          text NOT NULL CHECK (email <> ''),
    name           text NOT NULL DEFAULT '',
    bio            text NOT NULL DEFAULT '',
    location       text NOT NULL DEFAULT '',
    profile_photo  text,
    skills_offered text[] NOT NULL DEFAULT '{{}}',
    skills_wanted  text[] NOT NULL DEFAULT '{{}}',
    rating         numeric(2, 1) NOT NULL DEFAULT 0 CHECK (rating BETWEEN 0 AND 5),
    total_ratings  integer NOT NULL DEFAULT 0 CHECK (total_ratings >= 0),
    is_active      boolean NOT NULL DEFAULT true,
    created_at     timestamptz NOT NULL DEFAULT now(),
    updated_at     timestamptz NOT NULL DEFAULT now(),
    CHECK (updated_at >= created_at)
);

CREATE UNIQUE INDEX IF NOT EXISTS {table}_email_active_key
    ON {table} (email) WHERE is_active;

CREATE INDEX IF NOT EXISTS {table}_location_created_idx
    ON {table} (location, created_at DESC);
"""

_FUNCTIONS_DDL: str = """
CREATE OR REPLACE FUNCTION rate_user(p_user_id uuid, p_rating numeric)
RETURNS SETOF {table}
LANGUAGE sql AS $$
    UPDATE {table}
       SET rating = round((rating * total_ratings + p_rating) / (total_ratings + 1), 1),
           total_ratings = total_ratings + 1,
           updated_at = greatest(now(), updated_at)
     WHERE user_id = p_user_id AND is_active
    RETURNING *;
$$;

CREATE OR REPLACE FUNCTION add_user_skill(p_user_id uuid, p_column text, p_skill text)
RETURNS SETOF {table}
LANGUAGE plpgsql AS $$
BEGIN
    IF p_column = 'skills_offered' THEN
        RETURN QUERY
        UPDATE {table}
           SET skills_offered = CASE WHEN p_skill = ANY(skills_offered)
                                     THEN skills_offered
                                     ELSE array_append(skills_offered, p_skill) END,
               updated_at = CASE WHEN p_skill = ANY(skills_offered)
                                 THEN updated_at
                                 ELSE greatest(now(), updated_at) END
         WHERE user_id = p_user_id AND is_active
        RETURNING *;
    ELSIF p_column = 'skills_wanted' THEN
        RETURN QUERY
        UPDATE {table}
           SET skills_wanted = CASE WHEN p_skill = ANY(skills_wanted)
                                    THEN skills_wanted
                                    ELSE array_append(skills_wanted, p_skill) END,
               updated_at = CASE WHEN p_skill = ANY(skills_wanted)
                                 THEN updated_at
                                 ELSE greatest(now(), updated_at) END
         WHERE user_id = p_user_id AND is_active
        RETURNING *;
    ELSE
        RAISE EXCEPTION 'invalid skill column %', p_column USING ERRCODE = '22023';
    END IF;
END;
$$;

CREATE OR REPLACE FUNCTION remove_user_skill(p_user_id uuid, p_column text, p_skill text)
RETURNS SETOF {table}
LANGUAGE plpgsql AS $$
BEGIN
    IF p_column = 'skills_offered' THEN
        RETURN QUERY
        UPDATE {table}
           SET skills_offered = array_remove(skills_offered, p_skill),
               updated_at = CASE WHEN p_skill = ANY(skills_offered)
                                 THEN greatest(now(), updated_at)
                                 ELSE updated_at END
         WHERE user_id = p_user_id AND is_active
        RETURNING *;
    ELSIF p_column = 'skills_wanted' THEN
        RETURN QUERY
        UPDATE {table}
           SET skills_wanted = array_remove(skills_wanted, p_skill),
               updated_at = CASE WHEN p_skill = ANY(skills_wanted)
                                 THEN greatest(now(), updated_at)
                                 ELSE updated_at END
         WHERE user_id = p_user_id AND is_active
        RETURNING *;
    ELSE
        RAISE EXCEPTION 'invalid skill column %', p_column USING ERRCODE = '22023';
    END IF;
END;
$$;

CREATE OR REPLACE FUNCTION users_offering_skills(p_skills text[], p_exclude_user_id uuid DEFAULT NULL)
RETURNS SETOF {table}
LANGUAGE sql STABLE AS $$
    SELECT *
      FROM {table}
     WHERE is_active
       AND skills_offered && p_skills
       AND user_id IS DISTINCT FROM p_exclude_user_id
     ORDER BY user_id;
$$;
"""


def render_schema(table: str = "users") -> str:
    """Return the full DDL (table, indexes, functions) for *table*."""
    return (_TABLE_DDL + _FUNCTIONS_DDL).format(table=table).strip() + "\n"


SCHEMA_SQL: str = render_schema()
