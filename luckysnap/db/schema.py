from __future__ import annotations

RAFFLE_STATUSES = ("draft", "active", "finished")
ORDER_STATUSES = ("PENDING", "PAID", "COMPLETED", "CANCELLED", "EXPIRED")
ADMIN_ROLES = ("Administrator", "Editor")


def ensure_schema(conn) -> None:
    cur = conn.cursor()
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS raffles (
            id uuid PRIMARY KEY,
            title text NOT NULL,
            slug text NOT NULL UNIQUE,
            description text,
            hero_image text,
            gallery jsonb NOT NULL DEFAULT '[]'::jsonb,
            ticket_price numeric(10,2) NOT NULL CHECK (ticket_price >= 0),
            ticket_count int NOT NULL CHECK (ticket_count > 0),
            draw_date timestamptz,
            packs jsonb NOT NULL DEFAULT '[]'::jsonb,
            bonuses jsonb NOT NULL DEFAULT '[]'::jsonb,
            status text NOT NULL DEFAULT 'draft'
                CHECK (status IN ('draft', 'active', 'finished')),
            created_at timestamptz NOT NULL DEFAULT now(),
            updated_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute("CREATE INDEX IF NOT EXISTS raffles_status_idx ON raffles (status);")
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS customers (
            id uuid PRIMARY KEY,
            name text NOT NULL,
            phone text NOT NULL UNIQUE,
            email text UNIQUE,
            district text,
            created_at timestamptz NOT NULL DEFAULT now(),
            updated_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS orders (
            id uuid PRIMARY KEY,
            folio text NOT NULL UNIQUE,
            raffle_id uuid NOT NULL REFERENCES raffles(id) ON DELETE CASCADE,
            customer_id uuid REFERENCES customers(id) ON DELETE SET NULL,
            customer_name text NOT NULL,
            customer_phone text NOT NULL,
            customer_email text,
            customer_district text,
            tickets int[] NOT NULL,
            total_amount numeric(10,2) NOT NULL CHECK (total_amount >= 0),
            status text NOT NULL DEFAULT 'PENDING'
                CHECK (status IN ('PENDING', 'PAID', 'COMPLETED', 'CANCELLED', 'EXPIRED')),
            payment_method text,
            notes text,
            created_at timestamptz NOT NULL DEFAULT now(),
            expires_at timestamptz NOT NULL,
            updated_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute("CREATE INDEX IF NOT EXISTS orders_raffle_id_idx ON orders (raffle_id);")
    cur.execute("CREATE INDEX IF NOT EXISTS orders_status_idx ON orders (status);")
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS order_tickets (
            raffle_id uuid NOT NULL REFERENCES raffles(id) ON DELETE CASCADE,
            number int NOT NULL CHECK (number > 0),
            order_id uuid NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
            PRIMARY KEY (raffle_id, number)
        );
        """
    )
    cur.execute(
        "CREATE INDEX IF NOT EXISTS order_tickets_order_id_idx ON order_tickets (order_id);"
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS winners (
            id uuid PRIMARY KEY,
            raffle_id uuid NOT NULL REFERENCES raffles(id) ON DELETE CASCADE,
            order_id uuid REFERENCES orders(id) ON DELETE SET NULL,
            customer_id uuid REFERENCES customers(id) ON DELETE SET NULL,
            ticket_number int,
            name text NOT NULL,
            prize text NOT NULL,
            image_url text,
            raffle_title text NOT NULL,
            draw_date timestamptz,
            created_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS settings (
            id text PRIMARY KEY,
            document jsonb NOT NULL,
            version int NOT NULL DEFAULT 1,
            updated_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS admin_users (
            id uuid PRIMARY KEY,
            name text NOT NULL,
            username text NOT NULL UNIQUE,
            role text NOT NULL DEFAULT 'Editor'
                CHECK (role IN ('Administrator', 'Editor')),
            password_hash text NOT NULL,
            password_salt text NOT NULL,
            created_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS admin_sessions (
            token text PRIMARY KEY,
            admin_user_id uuid NOT NULL REFERENCES admin_users(id) ON DELETE CASCADE,
            created_at timestamptz NOT NULL DEFAULT now(),
            expires_at timestamptz NOT NULL
        );
        """
    )
    conn.commit()
    cur.close()
