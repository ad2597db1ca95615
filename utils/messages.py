"""
Centralized Indonesian UI messages.
All user-facing text in Indonesian for consistency.
"""

MESSAGES = {
    # Auth
    'login_success': 'Selamat datang {name}',
    'logout_success': 'Berhasil keluar',
    'login_required': 'Silakan login untuk mengakses halaman ini',
    'invalid_credentials': 'Username atau password salah',
    'account_inactive': 'Akun Anda telah dinonaktifkan. Hubungi administrator.',
    'permission_denied': 'Tidak memiliki akses untuk tindakan ini',
    'too_many_requests': 'Terlalu banyak request. Silakan coba lagi nanti.',
    'wrong_password': 'Password saat ini salah',
    'password_updated': 'Password berhasil diubah',
    'register_success': 'Registrasi berhasil. Silakan login.',
    'profile_updated': 'Profil berhasil diperbarui',
    'username_exists': 'Username sudah digunakan',
    'email_exists': 'Email sudah digunakan',

    # User management
    'user_not_found': 'User tidak ditemukan',
    'user_activated': 'User berhasil diaktifkan',
    'user_deactivated': 'User berhasil dinonaktifkan',
    'user_deleted': 'User berhasil dihapus',
    'cannot_modify_self': 'Tidak dapat menonaktifkan atau menghapus akun sendiri',
    'last_admin': 'Tidak dapat menonaktifkan admin aktif terakhir',

    # Reservation success messages
    'reservation_created': 'Reservasi berhasil diajukan. Menunggu persetujuan admin.',
    'reservation_updated': 'Reservasi berhasil diperbarui',
    'reservation_cancelled': 'Reservasi berhasil dibatalkan',
    'reservation_deleted': 'Reservasi berhasil dihapus',
    'reservation_deleted_admin': 'Reservasi berhasil dihapus oleh admin',
    'reservation_approved': 'Reservasi berhasil disetujui',
    'reservation_rejected': 'Reservasi berhasil ditolak',
    'reservation_completed': 'Reservasi berhasil ditandai selesai',

    # Reservation errors
    'reservation_not_found': 'Reservasi tidak ditemukan',
    'not_owner': 'Tidak memiliki akses untuk reservasi ini',
    'conflict': 'Sumber daya sudah dipesan pada waktu tersebut',
    'conflict_on_approve': 'Tidak dapat menyetujui reservasi karena ada konflik jadwal',
    'invalid_transition': 'Tidak dapat mengubah status dari {current} ke {target}. Transisi yang diizinkan: {allowed}',
    'terminal_status': 'Tidak dapat mengubah status {current}; reservasi hanya dapat dihapus',
    'status_required': 'Status harus disediakan',
    'status_not_allowed': 'Status harus berupa approved, rejected, atau completed',
    'status_changed_concurrently': 'Status reservasi telah berubah, silakan muat ulang',
    'edit_only_pending': 'Hanya reservasi dengan status pending yang dapat diedit',
    'edit_after_start': 'Tidak dapat mengedit reservasi yang sudah lewat waktunya',
    'cancel_after_start': 'Tidak dapat membatalkan reservasi yang sudah dimulai',
    'delete_not_allowed': 'Hanya reservasi yang dibatalkan atau ditolak yang dapat dihapus',
    'delete_not_allowed_tour': 'Hanya tur yang dibatalkan, ditolak, atau sudah selesai yang dapat dihapus',

    # Interval validation
    'field_required': '{field} harus diisi',
    'invalid_datetime': 'Format tanggal atau waktu tidak valid',
    'invalid_date': 'Format tanggal tidak valid (YYYY-MM-DD)',
    'end_before_start': 'Waktu selesai harus setelah waktu mulai',
    'in_the_past': 'Tidak dapat membuat reservasi untuk waktu yang sudah lewat',
    'past_date': 'Tidak dapat mencari slot untuk tanggal yang sudah lewat',
    'invalid_slot_minutes': 'Ukuran slot harus antara 1 dan {max} menit',
    'invalid_year': 'Tahun harus antara {min} dan {max}',
    'max_duration': 'Durasi peminjaman maksimal {hours} jam',
    'tour_duration': 'Durasi tur harus antara {min}-{max} menit',
    'multi_day': 'Reservasi harus dimulai dan selesai pada hari yang sama',
    'outside_hours': 'Sumber daya hanya beroperasi dari {start} - {end}',
    'invalid_participants': 'Jumlah peserta minimal 1 orang',
    'over_capacity': 'Jumlah peserta ({count}) melebihi kapasitas ruangan ({capacity})',
    'invalid_choice': 'Nilai {field} tidak valid',
    'invalid_phone': 'Format nomor telepon tidak valid',
    'invalid_email': 'Format email tidak valid',
    'contact_required': 'Nama dan nomor telepon penanggung jawab harus diisi',
    'invalid_file_type': 'Tipe file tidak diizinkan. Hanya mendukung: {extensions}',
    'file_too_large': 'File terlalu besar. Maksimal 5MB.',

    # Resources
    'resource_unavailable': 'Sumber daya tidak ditemukan atau tidak aktif',
    'resource_not_found': 'Sumber daya tidak ditemukan',
    'resource_created': 'Sumber daya berhasil dibuat',
    'resource_updated': 'Sumber daya berhasil diperbarui',
    'resource_activated': 'Sumber daya berhasil diaktifkan',
    'resource_deactivated': 'Sumber daya berhasil dinonaktifkan',
    'resource_deleted': 'Sumber daya berhasil dihapus',
    'resource_immutable': 'Sumber daya reservasi tidak dapat diubah',
    'resource_has_reservations': 'Tidak dapat menghapus sumber daya yang masih memiliki riwayat reservasi; nonaktifkan saja',
    'resource_name_exists': 'Nama sumber daya sudah digunakan',
    'invalid_time_format': 'Format jam operasional tidak valid (HH:MM)',
    'invalid_operating_hours': 'Jam selesai operasional harus setelah jam mulai',
    'invalid_kind': 'Jenis sumber daya tidak valid',
    'invalid_capacity': 'Kapasitas ruangan harus antara 1 dan 1000 orang',
    'available': 'Sumber daya tersedia pada waktu tersebut',
    'not_available': 'Sumber daya tidak tersedia pada waktu tersebut',

    # Generic
    'not_found': 'Halaman tidak ditemukan',
    'method_not_allowed': 'Metode tidak diizinkan',
    'server_error': 'Terjadi kesalahan pada server',
    'invalid_payload': 'Data permintaan tidak valid',
}

# History notes written by the system
HISTORY_NOTES = {
    'submitted': 'Reservasi diajukan',
    'cancelled_by_user': 'Dibatalkan oleh user',
    'resource_deactivated': 'Sumber daya dinonaktifkan oleh admin',
}
