"""Canonical output column orders for the flat and headcount reports."""

from __future__ import annotations

# Column order of the full detail workbook. Names absent from a batch render
# as empty columns.
OUTPUT_FIELDS: tuple[str, ...] = (
    # BASIC INFO
    "No",
    "Name",
    "Employee No",
    "No KTP",
    "Gov. Tax File No.",
    "Position",
    "Department",
    "Directorate",
    "Directorate 2",
    "Tax Location Code",
    "Cost Center By Function",
    "Jobstatus Code",
    "Jobstatus Name",
    "Work Location Code",
    "Work Location",
    "Cost Center Code",
    "Tax Location Name",
    "Cost Center",
    "Coa",
    "Level",
    "Grade",
    "Gender",
    "Employment Status",
    "Join Date",
    "Terminate Date",
    "Length Of Service",
    "Tax Status",
    "Company Bank Account",
    "Company Account Name",
    "Company Bank Name",
    "Bank Account",
    "Account Name",
    "Bank Name",
    "Birth Date",
    "Insurance No BPJSKT",
    "Insurance No BPJSKES",
    # ALLOWANCE - SALARY
    "Basic Salary",
    "Basic Salary Tambahan",
    "Additional Salary",
    "Additional Salary Gross",
    "Rapel Salary",
    "Rapel Salary Gross",
    "Rapel Mitra Sudah Dibayar",
    "Total Basic Salary",
    # ALLOWANCE - TUNJANGAN - Uang Makan
    "Uang Makan",
    "Additional Uang Makan",
    "Total Uang Makan",
    "Uang Makan & Transport",
    "Uang Makan Bulanan",
    # ALLOWANCE - TUNJANGAN - Uang Transport
    "Uang Transport",
    "Additional Uang Transport",
    "Rapel Uang Transport",
    "Tunjangan Transport Commercial",
    "Additional Tunjangan Transport Commercial",
    "Total Uang Transport",
    # ALLOWANCE - TUNJANGAN - Tunjangan Jabatan
    "Tunjangan Jabatan",
    "Additional Tunjangan Jabatan",
    "Rapel Tunjangan Jabatan",
    "Tunjangan Jabatan Gross",
    "Additional Tunjangan Jabatan Gross",
    "Rapel Tunjangan Jabatan Gross",
    "Tunjangan Jabatan PJS",
    "Total Tunjangan Jabatan",
    # ALLOWANCE - INSENTIF
    "Insentif",
    "Insentif Gross",
    "Rapel Insentif",
    "Additional Insentif",
    "Additional Tunjangan Relokasi",
    "Additional Refund Loan",
    "Tunjangan Tempat Tinggal",
    "Reward",
    "Additional Reward",
    "Total Insentif Inhouse",
    # ALLOWANCE - TUNJANGAN TIDAK TETAP - Sisa Cuti
    "Sisa Cuti Dibayarkan",
    "Additional Sisa Cuti Dibayarkan",
    "Sisa Cuti Dibayarkan Gross",
    "Additional Sisa Cuti Dibayarkan Gross",
    "Total Sisa Cuti",
    # ALLOWANCE - TUNJANGAN TIDAK TETAP - Uang Pisah
    "Tunjangan Uang Pisah",
    "Uang Pisah Gross",
    "Additional Uang Pisah",
    "Total Uang Pisah",
    # ALLOWANCE - TUNJANGAN - Operasional
    "Netral Operasional dibayar Payroll",
    "Tunjangan Operasional",
    "Additional Tunjangan Operational",
    "Rapel Tunjangan Operational",
    "Total Tunjangan Operasional",
    # ALLOWANCE - TUNJANGAN - Komisi
    "Komisi Karyawan",
    "Additional Komisi Karyawan",
    "Total Komisi Karyawan",
    # ALLOWANCE - TUNJANGAN - Other
    "Tunjangan Pendidikan",
    "Tunjangan Bensin Harian",
    "Tunjangan Makan Harian",
    "Tunjangan Operasional Harian",
    "Tunjangan Pulsa Harian",
    "Tunjangan Volta",
    "Uang Jalan - Line Haul",
    "Uang Kerajinan",
    "Service Motor",
    "Severence",
    "Insentif Per Paket",
    # ALLOWANCE - INSENTIF - Mitra
    "Insentif Per Paket Mitra",
    "Insentif Perbantuan",
    "Additional Insentif Perbantuan",
    "Insentif Volta",
    "Target Paket",
    "Additional Target Paket",
    "Rapel Target Paket",
    "Additional Insentif Kerajinan Mitra",
    "Additional Insentif Sorter MItra",
    "Insentif Hari Minggu",
    "Rapel Insentif Hari Minggu",
    "Insentif Hari Minggu Mitra",
    "Insentif Kehadiran",
    "Insentif Kerajinan Mitra",
    "Insentif Mitra",
    "Additional Insentif Mitra",
    "Rapel Insentif Mitra",
    "Insentif Mitra Lain",
    "Additional Insentif Mitra Lain",
    "Rapel Insentif Mitra Lain",
    "Insentif Mitra Sorter",
    "Rapel Insentif Mitra Sorter",
    "Insentif Pembawaan Mitra 10 Kg",
    "Additional Insentif Per Paket Mitra",
    "Insentif Perbantuan Mitra",
    "Insentif Produktifitas Mitra",
    "Rapel Insentif Produktifitas Mitra",
    "Target Paket Mitra",
    "Additional Target Paket Mitra",
    "Rapel Target Paket Mitra",
    "Total Insentif Mitra",
    # ALLOWANCE - REWARD - Mitra
    "Additional Loyalty Fee Mitra",
    "Loyalty Fee Mitra",
    "Additional Reward Mitra",
    "Additional Reward Mitra Semester",
    "Reward Be A Star",
    "Reward Bulanan Mitra",
    "Reward Semester Mitra",
    "Rewards",
    # ALLOWANCE - BONUS - Inhouse
    "Bonus",
    "Additional Bonus Carrot And Stick",
    "Additional Bonus CPP",
    "Additional Bonus Paket",
    "Rapel Bonus Paket",
    "Bonus First & Last",
    "Bonus KPI",
    "Additional Bonus KPI",
    "Bonus COD",
    "Rapel Bonus COD",
    "Total Bonus Inhouse",
    # ALLOWANCE - BONUS - Mitra
    "Bonus COD Mitra",
    "Additional Bonus COD Mitra",
    "Rapel Bonus COD Mitra",
    "Rapel Bonus Paket Mitra",
    "Rapel Bonus Per Paket",
    "Rapel Bonus Per Paket Mitra",
    "Bonus Mitra",
    "Additional Bonus Mitra",
    "Bonus Paket Coordinator",
    "Bonus Per Coli Mitra",
    "Bonus Volta",
    "Total Bonus Mitra",
    # ALLOWANCE - LEMBUR
    "Lembur - Line Haul",
    "Lembur Harian",
    "Lemburan",
    "Additional Lemburan",
    "Total Lembur",
    # ALLOWANCE - PERJALANAN DINAS
    "Uang Makan Perdin",
    "Uang Saku Perdin",
    "Total Perjalanan Dinas",
    # ALLOWANCE - KLAIM PENGOBATAN
    "Claim Frame",
    "Claim Lensa",
    "Claim Rawat Inap",
    "Additional Claim Rawat Inap",
    "Claim Rawat Jalan",
    "Additional Claim Rawat Jalan",
    "Santunan Maternity Caesar",
    "Santunan Maternity Miscarriage",
    "Santunan Maternity Normal",
    "Additional Maternity",
    "Total Biaya Pengobatan Karyawan",
    # ALLOWANCE - LOAN
    "Pengembalian Potongan Volta TEI",
    "BHR Mitra",
    # ALLOWANCE - THR
    "THR",
    "Additional THR",
    "Rapel THR",
    "THR Gross",
    "Total THR",
    # ALLOWANCE - BPJS
    "BPJS JKK (Pemberi Kerja)",
    "BPJS JKK (Pemberi Kerja) Gross",
    "BPJS JKM (Pemberi Kerja)",
    "BPJS JKM (Pemberi Kerja) Gross",
    "BPJS JHT (Pemberi Kerja)",
    "BPJS JHT (Pemberi Kerja) Gross",
    "BPJS Pensiun (Pemberi Kerja)",
    "BPJS Pensiun (Pemberi Kerja) Gross",
    "Total BPJS TK",
    "BPJS Kesehatan (Pemberi Kerja)",
    "BPJS Kesehatan (Pemberi Kerja) Gross",
    "Total BPJS Kes",
    # DEDUCTION - TUNJANGAN
    "Deduction Bensin Harian",
    "Deduction Makan Harian",
    "Deduction Pulsa Harian",
    "Tunjangan Operational Dibayar Kas",
    "Uang Jalan - Line Haul (D)",
    # DEDUCTION - INSENTIF/REWARD
    "Deduction Komisi Karyawan",
    "Reward (D)",
    # DEDUCTION - LEMBUR
    "Lembur - Line Haul (D)",
    "Lembur Harian (D)",
    # DEDUCTION - PERJALANAN DINAS
    "Uang Makan Perdin (D)",
    "Uang Saku Perdin (D)",
    # DEDUCTION - CUTI
    "Potongan Hutang Cuti",
    # DEDUCTION - OWN RISK
    "Pot. Own Risk",
    # DEDUCTION - LOAN
    "Pot. Audit",
    "Pot. Barang Hilang",
    "Pot. Denda",
    "Pot. Handphone",
    "Pot. Kasbon",
    "Pot. Kasbon Harian",
    "Pot. Kerusakan Volta",
    "Pot. Lain",
    "Pot. Lain Gross",
    "Pot. Volta SEI",
    "Pot. Volta T-FAS",
    "Potongan COD",
    "Potongan Uang Penalti",
    "Deposit Atribut",
    # DEDUCTION - BPJS
    "BPJS JKK (Kemitraan)",
    "BPJS JKM (Kemitraan)",
    "BPJS JHT",
    "BPJS JHT Gross",
    "BPJS Pensiun",
    "BPJS Pensiun Gross",
    "BPJS Kesehatan",
    "BPJS Kesehatan Gross",
    # DEDUCTION - TAX
    "Tax",
    "Tax Penalty Borne",
    # TOTAL DEDUCTION
    "Total Deduction",
    # THP BALANCE
    "THP Balancing",
    # NETRAL - SALARY
    "Basic Salary Full",
    "Tunjangan Jabatan Full",
    "Tunjangan Jabatan Full Gross",
    "Prorate Base",
    "Basic Jabatan",
    "Basic Jabatan PJS",
    # NETRAL - TUNJANGAN
    "Tunjangan Jabatan PJS Full",
    "Basic Tunjangan Operasional",
    "Netral Tunjangan Pendidikan",
    "Neutral Check Get Kerajinan",
    # NETRAL - CUTI
    "Jumlah Sisa Cuti",
    # NETRAL - INSENTIF
    "Nilai Insentif Kelipatan",
    "Nilai Insentif Kelipatan Mitra",
    "Pencapaian Target Paket",
    "Target Paket Bulanan",
    "Target Paket Bulanan Mitra",
    # NETRAL - BONUS
    "Bonus Kelipatan (Coli)",
    "Bonus Kelipatan (Coli) Mitra",
    "Bonus Per Coli",
    "Bonus Per Coli Mitra",
    "Bonus Utama",
    "Bonus Utama Mitra",
    "Zero Bonus Paket",
    # NETRAL - LEMBUR
    "Ovt Hari Raya (Natal/Idul Fitri)",
    "Ovt OFF Value",
    "Ovt WeekDay Value",
    # NETRAL - LOAN
    "Potongan Barang Hilang Salary Deduction Only",
    "Potongan Denda Salary Deduction Only",
    "Potongan Own Risk Salary Deduction Only",
    "KASBON (Saldo Piutang Awal)",
    "POTAUDIT (Saldo Piutang Awal)",
    "POTBRGHILANG (Saldo Piutang Awal)",
    "POTDENDA (Saldo Piutang Awal)",
    "POTHP (Saldo Piutang Awal)",
    "POTKERUSAKANVOLTA (Saldo Piutang Awal)",
    "POTLAIN (Saldo Piutang Awal)",
    "POTOWNRISK (Saldo Piutang Awal)",
    "POTVOLTA (Saldo Piutang Awal)",
    "POTVOLTASEI (Saldo Piutang Awal)",
    # NETRAL - JURNAL
    "Neutral Jurnal Balance Checker",
    # NETRAL - THR
    "Dasar Perhitungan THR",
    "Total Bulan Prorate THR",
    "Dasar Tunjangan Jabatan THR",
    "Dasar Tunjangan Jabatan PJS THR",
    # NETRAL - BPJS
    "Dasar BPJS JP",
    "Dasar BPJS KS",
    "Dasar BPJS TK",
    # NETRAL - FLAGGING
    "Periode Dirumahkan (Month)",
    "Flag Per Paket",
    "Flag Per Paket Mitra",
    "Is Freelance",
    "Persentase Dirumahkan",
    "Persentase Gaji Sakit Berkepanjangan",
    "PJS Flag",
    # NETRAL - COST CENTER
    "Office Cost Center",
    # NETRAL - HARI KERJA
    "Hari Kerja",
    "Hari Kerja Realisasi",
    "HK Payment",
    "Prorate Active Employee",
    "Total Hari Pembagi",
    "Total Pembawaan Paket",
)

# Demographic columns only; no pay components.
HEADCOUNT_FIELDS: tuple[str, ...] = (
    "No",
    "Name",
    "Employee No",
    "No KTP",
    "Gov. Tax File No.",
    "Position",
    "Department",
    "Directorate",
    "Directorate 2",
    "Tax Location",
    "Cost Center By Function",
    "Jobstatus Code",
    "Jobstatus Name",
    "Work Location Code",
    "Work Location",
    "Cost Center Code",
    "Tax Location Name",
    "Cost Center",
    "Coa",
    "Level",
    "Grade",
    "Gender",
    "Employment Status",
    "Join Date",
    "Terminate Date",
)


def is_output_field(name: str) -> bool:
    return name in _OUTPUT_SET


_OUTPUT_SET = frozenset(OUTPUT_FIELDS)
